from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

# bcrypt only hashes the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def check_password_bytes(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=20)
    email: EmailStr
    password: str = Field(..., min_length=6)

    class Config:
        str_strip_whitespace = True

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def limit_password(cls, value: str) -> str:
        return check_password_bytes(value)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=20)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    avatar: Optional[str] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value

    @field_validator("password")
    @classmethod
    def limit_password(cls, value: Optional[str]) -> Optional[str]:
        return check_password_bytes(value)

# Populated reference to a user, as embedded in questions and answers
class AuthorSummary(BaseModel):
    id: str
    username: str
    avatar: Optional[str] = None
    reputation: int = 0

class CommentAuthor(BaseModel):
    id: str
    username: str
    avatar: Optional[str] = None

class UserPublic(BaseModel):
    id: str
    username: str
    avatar: str
    reputation: int
    role: Literal["user", "admin"]
    questionsAsked: List[str]
    answersGiven: List[str]
    createdAt: datetime

    class Config:
        from_attributes = True

class UserProfile(UserPublic):
    email: EmailStr

class AuthResponse(UserProfile):
    token: str

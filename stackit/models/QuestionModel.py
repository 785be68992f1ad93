from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from stackit.models.AnswerModel import AnswerDetail
from stackit.models.CommonModel import Vote
from stackit.models.UserModel import AuthorSummary


# Trim and lowercase, dropping blanks and repeats
def normalize_tags(tags: List[str]) -> List[str]:
    normalized = []
    for tag in tags:
        tag = tag.strip().lower()
        if tag and tag not in normalized:
            normalized.append(tag)
    return normalized


class QuestionCreate(BaseModel):
    title: str = Field(..., min_length=10, max_length=200)
    description: str = Field(..., min_length=20)
    tags: List[str] = []

    class Config:
        str_strip_whitespace = True

    @field_validator("tags")
    @classmethod
    def lowercase_tags(cls, value: List[str]) -> List[str]:
        return normalize_tags(value)

class QuestionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=10, max_length=200)
    description: Optional[str] = Field(None, min_length=20)
    tags: Optional[List[str]] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("tags")
    @classmethod
    def lowercase_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_tags(value) if value is not None else value

class QuestionBase(BaseModel):
    id: str
    title: str
    description: str
    tags: List[str]
    author: Optional[AuthorSummary] = None
    votes: List[Vote]
    voteCount: int
    answerCount: int
    hasAcceptedAnswer: bool
    views: int
    isActive: bool
    createdAt: datetime
    updatedAt: datetime

    class Config:
        from_attributes = True

# Listing shape: answer ids, accepted answer populated
class QuestionSummary(QuestionBase):
    answers: List[str]
    acceptedAnswer: Optional[AnswerDetail] = None

# Single-question shape: answers populated, accepted answer as id
class QuestionDetail(QuestionBase):
    answers: List[AnswerDetail]
    acceptedAnswer: Optional[str] = None

class QuestionPage(BaseModel):
    questions: List[QuestionSummary]
    totalPages: int
    currentPage: int
    total: int

class TagCount(BaseModel):
    tag: str
    count: int

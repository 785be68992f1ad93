from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from stackit.models.CommonModel import Vote
from stackit.models.UserModel import AuthorSummary, CommentAuthor

class AnswerCreate(BaseModel):
    content: str = Field(..., min_length=10)
    questionId: str

class AnswerUpdate(BaseModel):
    content: str = Field(..., min_length=10)

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)

    class Config:
        str_strip_whitespace = True

class CommentDetail(BaseModel):
    id: str
    author: Optional[CommentAuthor] = None
    content: str
    createdAt: datetime

class AnswerDetail(BaseModel):
    id: str
    content: str
    author: Optional[AuthorSummary] = None
    question: str
    votes: List[Vote]
    voteCount: int
    isAccepted: bool
    comments: List[CommentDetail]
    createdAt: datetime
    updatedAt: datetime

    class Config:
        from_attributes = True

class AcceptResponse(BaseModel):
    message: str
    answer: AnswerDetail

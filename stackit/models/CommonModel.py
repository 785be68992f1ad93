from pydantic import BaseModel
from typing import Literal

VoteType = Literal["upvote", "downvote"]

class Vote(BaseModel):
    user: str
    type: VoteType

class VoteRequest(BaseModel):
    type: VoteType

class VoteResponse(BaseModel):
    message: str
    voteCount: int

class MessageResponse(BaseModel):
    message: str

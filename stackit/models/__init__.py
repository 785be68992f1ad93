from stackit.models.CommonModel import Vote, VoteType, VoteRequest, VoteResponse, MessageResponse
from stackit.models.UserModel import UserCreate, UserLogin, UserUpdate, UserPublic, UserProfile, AuthResponse
from stackit.models.AnswerModel import AnswerCreate, AnswerUpdate, AnswerDetail, CommentCreate, AcceptResponse
from stackit.models.QuestionModel import QuestionCreate, QuestionUpdate, QuestionSummary, QuestionDetail, QuestionPage, TagCount

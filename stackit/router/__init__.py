from stackit.router.UserService import user_router
from stackit.router.QuestionService import question_router
from stackit.router.AnswerService import answer_router

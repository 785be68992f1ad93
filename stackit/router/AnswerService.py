import logging
from datetime import datetime, timezone
from typing import List

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, status

from stackit.config.auth import get_current_user
from stackit.config.database import db
from stackit.models.AnswerModel import AcceptResponse, AnswerCreate, AnswerDetail, AnswerUpdate, CommentCreate
from stackit.models.CommonModel import MessageResponse, VoteRequest, VoteResponse
from stackit.router.documents import is_owner, populate_answers, to_object_id
from stackit.router.voting import apply_vote, vote_count

logger = logging.getLogger(__name__)

answer_router = APIRouter()


# Utility: fetch an answer or raise 404
def get_answer_or_404(answer_id: str) -> dict:
    answer = db.answers.find_one({"_id": to_object_id(answer_id)})
    if not answer:
        raise HTTPException(status_code=404, detail="Answer not found")
    return answer


def populate_answer(answer: dict) -> dict:
    return populate_answers([answer])[0]


# Fetch answers by question ID, newest first
@answer_router.get("/question/{question_id}", response_model=List[AnswerDetail])
def get_answers_by_question(question_id: str):
    answers = list(
        db.answers.find({"question": to_object_id(question_id)}).sort([("createdAt", -1), ("_id", -1)])
    )
    return populate_answers(answers)


# Create an answer
@answer_router.post("", response_model=AnswerDetail, status_code=status.HTTP_201_CREATED)
def create_answer(answer: AnswerCreate, current_user: dict = Depends(get_current_user)):
    question = db.questions.find_one({"_id": to_object_id(answer.questionId), "isActive": True})
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")

    now = datetime.now(timezone.utc)
    answer_data = {
        "content": answer.content,
        "author": current_user["_id"],
        "question": question["_id"],
        "votes": [],
        "isAccepted": False,
        "comments": [],
        "createdAt": now,
        "updatedAt": now,
    }
    result = db.answers.insert_one(answer_data)
    answer_data["_id"] = result.inserted_id

    # Add answer ID to question's answers list
    db.questions.update_one({"_id": question["_id"]}, {"$push": {"answers": result.inserted_id}})

    # Add answer ID to user's answersGiven list
    db.users.update_one({"_id": current_user["_id"]}, {"$push": {"answersGiven": result.inserted_id}})

    logger.info(f"User {current_user['_id']} answered question {question['_id']} with {result.inserted_id}")
    return populate_answer(answer_data)


# Update an answer
@answer_router.put("/{answer_id}", response_model=AnswerDetail)
def update_answer(answer_id: str, updated_answer: AnswerUpdate, current_user: dict = Depends(get_current_user)):
    answer = get_answer_or_404(answer_id)
    if not is_owner(answer, current_user):
        logger.warning(f"User {current_user['_id']} tried to edit answer {answer_id}")
        raise HTTPException(status_code=403, detail="Not authorized")

    now = datetime.now(timezone.utc)
    db.answers.update_one({"_id": answer["_id"]}, {"$set": {"content": updated_answer.content, "updatedAt": now}})
    answer.update(content=updated_answer.content, updatedAt=now)
    return populate_answer(answer)


# Delete an answer, detaching it from its question and author first
@answer_router.delete("/{answer_id}", response_model=MessageResponse)
def delete_answer(answer_id: str, current_user: dict = Depends(get_current_user)):
    answer = get_answer_or_404(answer_id)
    if not is_owner(answer, current_user) and current_user.get("role") != "admin":
        logger.warning(f"User {current_user['_id']} tried to delete answer {answer_id}")
        raise HTTPException(status_code=403, detail="Not authorized")

    db.questions.update_one({"_id": answer["question"]}, {"$pull": {"answers": answer["_id"]}})
    db.questions.update_one(
        {"_id": answer["question"], "acceptedAnswer": answer["_id"]},
        {"$set": {"acceptedAnswer": None}},
    )
    db.users.update_one({"_id": answer["author"]}, {"$pull": {"answersGiven": answer["_id"]}})
    db.answers.delete_one({"_id": answer["_id"]})

    logger.info(f"Answer {answer_id} deleted by {current_user['_id']}")
    return {"message": "Answer deleted"}


@answer_router.put("/{answer_id}/vote", response_model=VoteResponse)
def vote_answer(answer_id: str, vote: VoteRequest, current_user: dict = Depends(get_current_user)):
    votes = apply_vote(db.answers, {"_id": to_object_id(answer_id)}, current_user["_id"], vote.type)
    if votes is None:
        raise HTTPException(status_code=404, detail="Answer not found")
    return {"message": "Vote updated", "voteCount": vote_count(votes)}


@answer_router.put("/{answer_id}/accept", response_model=AcceptResponse)
def accept_answer(answer_id: str, current_user: dict = Depends(get_current_user)):
    answer = get_answer_or_404(answer_id)

    question = db.questions.find_one({"_id": answer["question"], "isActive": True})
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")

    if not is_owner(question, current_user):
        logger.warning(f"User {current_user['_id']} tried to accept answer {answer_id}")
        raise HTTPException(status_code=403, detail="Only question author can accept answers")

    if answer["_id"] not in question.get("answers", []):
        raise HTTPException(status_code=400, detail="Answer does not belong to this question")

    now = datetime.now(timezone.utc)

    # Clear every other accepted answer of this question, not only the pointed-to one
    db.answers.update_many(
        {"question": question["_id"], "_id": {"$ne": answer["_id"]}, "isAccepted": True},
        {"$set": {"isAccepted": False, "updatedAt": now}},
    )
    db.answers.update_one({"_id": answer["_id"]}, {"$set": {"isAccepted": True, "updatedAt": now}})
    db.questions.update_one(
        {"_id": question["_id"]},
        {"$set": {"acceptedAnswer": answer["_id"], "updatedAt": now}},
    )

    logger.info(f"Answer {answer_id} accepted on question {question['_id']}")
    answer.update(isAccepted=True, updatedAt=now)
    return {"message": "Answer accepted", "answer": populate_answer(answer)}


@answer_router.post("/{answer_id}/comment", response_model=AnswerDetail)
def add_comment(answer_id: str, comment: CommentCreate, current_user: dict = Depends(get_current_user)):
    answer = get_answer_or_404(answer_id)

    comment_data = {
        "_id": ObjectId(),
        "author": current_user["_id"],
        "content": comment.content,
        "createdAt": datetime.now(timezone.utc),
    }
    db.answers.update_one({"_id": answer["_id"]}, {"$push": {"comments": comment_data}})

    answer.setdefault("comments", []).append(comment_data)
    return populate_answer(answer)

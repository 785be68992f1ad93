import logging
import math
import re
from datetime import datetime, timezone
from typing import List, Optional

import pymongo
from fastapi import APIRouter, Depends, HTTPException, status

from stackit.config.auth import get_current_user
from stackit.config.database import db
from stackit.config.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, POPULAR_TAGS_LIMIT
from stackit.models.CommonModel import MessageResponse, VoteRequest, VoteResponse
from stackit.models.QuestionModel import QuestionCreate, QuestionDetail, QuestionPage, QuestionUpdate, TagCount
from stackit.router.documents import is_owner, populate_question_detail, populate_question_list, to_object_id
from stackit.router.voting import apply_vote, vote_count

logger = logging.getLogger(__name__)

question_router = APIRouter()

SORT_OPTIONS = {
    "newest": [("createdAt", pymongo.DESCENDING), ("_id", pymongo.DESCENDING)],
    "oldest": [("createdAt", pymongo.ASCENDING), ("_id", pymongo.ASCENDING)],
    "views": [("views", pymongo.DESCENDING), ("createdAt", pymongo.DESCENDING), ("_id", pymongo.DESCENDING)],
}
LEADING_INT = re.compile(r"\s*([+-]?\d+)")


# Reads leading digits the way a browser's parseInt does: "2.5" and "2abc" are 2
def parse_positive_int(value: Optional[str], default: int) -> int:
    match = LEADING_INT.match(value) if value else None
    if not match:
        return default
    number = int(match.group(1))
    return number if number > 0 else default


def build_question_filter(search: Optional[str], tag: Optional[str]) -> dict:
    query = {"isActive": True}

    # Search input is matched literally, case-insensitive
    if search and search.strip():
        pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
        query["$or"] = [
            {"title": pattern},
            {"description": pattern},
            {"tags": pattern},
        ]

    if tag and tag.strip():
        query["tags"] = tag.strip().lower()

    return query


# Utility: fetch an active question or raise 404
def get_active_question(question_id: str) -> dict:
    question = db.questions.find_one({"_id": to_object_id(question_id), "isActive": True})
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return question


# Fetch questions: search, tag filter, sort and pagination
@question_router.get("", response_model=QuestionPage)
def get_questions(
    search: Optional[str] = None,
    tag: Optional[str] = None,
    sort: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
):
    page_number = parse_positive_int(page, 1)
    page_size = min(parse_positive_int(limit, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
    skip = (page_number - 1) * page_size

    query = build_question_filter(search, tag)

    if sort == "votes":
        # The tally is not stored, so rank in the application
        matching = list(db.questions.find(query))
        matching.sort(key=lambda q: (vote_count(q.get("votes") or []), q["createdAt"], q["_id"]), reverse=True)
        total = len(matching)
        questions = matching[skip:skip + page_size]
    else:
        sort_option = SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"])
        questions = list(db.questions.find(query).sort(sort_option).skip(skip).limit(page_size))
        total = db.questions.count_documents(query)

    return {
        "questions": populate_question_list(questions),
        "totalPages": math.ceil(total / page_size),
        "currentPage": page_number,
        "total": total,
    }


# Popular tags over active questions
@question_router.get("/tags", response_model=List[TagCount])
def get_popular_tags():
    tags = db.questions.aggregate([
        {"$match": {"isActive": True}},
        {"$unwind": "$tags"},
        {"$group": {"_id": "$tags", "count": {"$sum": 1}}},
        {"$sort": {"count": -1, "_id": 1}},
        {"$limit": POPULAR_TAGS_LIMIT},
    ])
    return [{"tag": t["_id"], "count": t["count"]} for t in tags]


# Fetch question by ID; each read counts as a view
@question_router.get("/{question_id}", response_model=QuestionDetail)
def get_question(question_id: str):
    question = db.questions.find_one_and_update(
        {"_id": to_object_id(question_id), "isActive": True},
        {"$inc": {"views": 1}},
        return_document=pymongo.ReturnDocument.AFTER,
    )
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return populate_question_detail(question)


# Create a question
@question_router.post("", response_model=QuestionDetail, status_code=status.HTTP_201_CREATED)
def create_question(question: QuestionCreate, current_user: dict = Depends(get_current_user)):
    now = datetime.now(timezone.utc)
    question_data = {
        "title": question.title,
        "description": question.description,
        "tags": question.tags,
        "author": current_user["_id"],
        "answers": [],
        "acceptedAnswer": None,
        "votes": [],
        "views": 0,
        "isActive": True,
        "createdAt": now,
        "updatedAt": now,
    }
    result = db.questions.insert_one(question_data)

    # Add question ID to user's questionsAsked
    db.users.update_one({"_id": current_user["_id"]}, {"$push": {"questionsAsked": result.inserted_id}})

    logger.info(f"User {current_user['_id']} asked question {result.inserted_id}")
    question_data["_id"] = result.inserted_id
    return populate_question_detail(question_data)


@question_router.put("/{question_id}", response_model=QuestionDetail)
def update_question(question_id: str, updated_data: QuestionUpdate, current_user: dict = Depends(get_current_user)):
    question = get_active_question(question_id)
    if not is_owner(question, current_user):
        logger.warning(f"User {current_user['_id']} tried to edit question {question_id}")
        raise HTTPException(status_code=403, detail="Not authorized")

    update_fields = updated_data.model_dump(exclude_none=True)
    update_fields["updatedAt"] = datetime.now(timezone.utc)

    result = db.questions.find_one_and_update(
        {"_id": question["_id"]},
        {"$set": update_fields},
        return_document=pymongo.ReturnDocument.AFTER,
    )
    return populate_question_detail(result)


# Soft delete: answers of the question stay in place
@question_router.delete("/{question_id}", response_model=MessageResponse)
def delete_question(question_id: str, current_user: dict = Depends(get_current_user)):
    question = get_active_question(question_id)
    if not is_owner(question, current_user) and current_user.get("role") != "admin":
        logger.warning(f"User {current_user['_id']} tried to delete question {question_id}")
        raise HTTPException(status_code=403, detail="Not authorized")

    db.questions.update_one(
        {"_id": question["_id"]},
        {"$set": {"isActive": False, "updatedAt": datetime.now(timezone.utc)}},
    )
    logger.info(f"Question {question_id} deactivated by {current_user['_id']}")
    return {"message": "Question deleted"}


@question_router.put("/{question_id}/vote", response_model=VoteResponse)
def vote_question(question_id: str, vote: VoteRequest, current_user: dict = Depends(get_current_user)):
    votes = apply_vote(
        db.questions,
        {"_id": to_object_id(question_id), "isActive": True},
        current_user["_id"],
        vote.type,
    )
    if votes is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return {"message": "Vote updated", "voteCount": vote_count(votes)}

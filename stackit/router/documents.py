from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException

from stackit.config.database import db
from stackit.router.voting import vote_count

AUTHOR_FIELDS = {"username": 1, "avatar": 1, "reputation": 1}
COMMENT_AUTHOR_FIELDS = {"username": 1, "avatar": 1}


def to_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail="Invalid id")


def is_owner(document: dict, user: dict, field: str = "author") -> bool:
    return str(document[field]) == str(user["_id"])


def default_avatar(username: str) -> str:
    return f"https://api.dicebear.com/6.x/adventurer/svg?seed={username}"


# Utility: fetch many users at once, keyed by id
def find_users(user_ids: Iterable[ObjectId], fields: dict) -> Dict[ObjectId, dict]:
    ids = list({user_id for user_id in user_ids if user_id is not None})
    if not ids:
        return {}
    return {user["_id"]: user for user in db.users.find({"_id": {"$in": ids}}, fields)}


def format_user_ref(user: Optional[dict]) -> Optional[dict]:
    if not user:
        return None
    ref = {key: value for key, value in user.items() if key != "_id"}
    ref["id"] = str(user["_id"])
    return ref


def format_user(user: dict, include_email: bool = True) -> dict:
    profile = {
        "id": str(user["_id"]),
        "username": user["username"],
        "avatar": user.get("avatar") or default_avatar(user["username"]),
        "reputation": user.get("reputation", 0),
        "role": user.get("role", "user"),
        "questionsAsked": [str(q) for q in user.get("questionsAsked", [])],
        "answersGiven": [str(a) for a in user.get("answersGiven", [])],
        "createdAt": user["createdAt"],
    }
    if include_email:
        profile["email"] = user["email"]
    return profile


def format_votes(votes: List[dict]) -> List[dict]:
    return [{"user": str(vote["user"]), "type": vote["type"]} for vote in votes]


def format_answer(answer: dict, authors: Dict[ObjectId, dict], commenters: Dict[ObjectId, dict]) -> dict:
    votes = answer.get("votes", [])
    return {
        "id": str(answer["_id"]),
        "content": answer["content"],
        "author": format_user_ref(authors.get(answer["author"])),
        "question": str(answer["question"]),
        "votes": format_votes(votes),
        "voteCount": vote_count(votes),
        "isAccepted": answer.get("isAccepted", False),
        "comments": [
            {
                "id": str(comment["_id"]),
                "author": format_user_ref(commenters.get(comment["author"])),
                "content": comment["content"],
                "createdAt": comment["createdAt"],
            }
            for comment in answer.get("comments", [])
        ],
        "createdAt": answer["createdAt"],
        "updatedAt": answer.get("updatedAt", answer["createdAt"]),
    }


def populate_answers(answers: List[dict]) -> List[dict]:
    # One users query for answer authors, one for comment authors
    authors = find_users((a["author"] for a in answers), AUTHOR_FIELDS)
    commenters = find_users(
        (c["author"] for a in answers for c in a.get("comments", [])),
        COMMENT_AUTHOR_FIELDS,
    )
    return [format_answer(answer, authors, commenters) for answer in answers]


def format_question(question: dict, author: Optional[dict]) -> dict:
    votes = question.get("votes", [])
    return {
        "id": str(question["_id"]),
        "title": question["title"],
        "description": question["description"],
        "tags": question.get("tags", []),
        "author": format_user_ref(author),
        "answers": [str(a) for a in question.get("answers", [])],
        "acceptedAnswer": str(question["acceptedAnswer"]) if question.get("acceptedAnswer") else None,
        "votes": format_votes(votes),
        "voteCount": vote_count(votes),
        "answerCount": len(question.get("answers", [])),
        "hasAcceptedAnswer": bool(question.get("acceptedAnswer")),
        "views": question.get("views", 0),
        "isActive": question.get("isActive", True),
        "createdAt": question["createdAt"],
        "updatedAt": question.get("updatedAt", question["createdAt"]),
    }


# Listing shape: author and accepted answer populated
def populate_question_list(questions: List[dict]) -> List[dict]:
    authors = find_users((q["author"] for q in questions), AUTHOR_FIELDS)
    accepted_ids = [q["acceptedAnswer"] for q in questions if q.get("acceptedAnswer")]
    accepted = {}
    if accepted_ids:
        answers = list(db.answers.find({"_id": {"$in": accepted_ids}}))
        accepted = {a["_id"]: formatted for a, formatted in zip(answers, populate_answers(answers))}

    results = []
    for question in questions:
        item = format_question(question, authors.get(question["author"]))
        item["acceptedAnswer"] = accepted.get(question.get("acceptedAnswer"))
        results.append(item)
    return results


# Single-question shape: author and every answer populated
def populate_question_detail(question: dict) -> dict:
    authors = find_users([question["author"]], AUTHOR_FIELDS)
    answer_ids = question.get("answers", [])
    answers = list(db.answers.find({"_id": {"$in": answer_ids}})) if answer_ids else []
    by_id = {a["_id"]: formatted for a, formatted in zip(answers, populate_answers(answers))}

    item = format_question(question, authors.get(question["author"]))
    # Keep the question's answer order; ids without a document are skipped
    item["answers"] = [by_id[answer_id] for answer_id in answer_ids if answer_id in by_id]
    return item

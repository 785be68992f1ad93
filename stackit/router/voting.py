import logging
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from fastapi import HTTPException, status
from pymongo.collection import Collection

logger = logging.getLogger(__name__)

MAX_VOTE_ATTEMPTS = 3


# Utility: add, remove or switch the user's vote; the input list is left untouched
def toggle_vote(votes: List[dict], user_id: ObjectId, vote_type: str) -> List[dict]:
    updated = []
    found = False
    for vote in votes:
        if not found and str(vote["user"]) == str(user_id):
            found = True
            if vote["type"] != vote_type:
                updated.append({"user": vote["user"], "type": vote_type})
            continue
        updated.append(vote)
    if not found:
        updated.append({"user": user_id, "type": vote_type})
    return updated


def vote_count(votes: List[dict]) -> int:
    upvotes = sum(1 for vote in votes if vote["type"] == "upvote")
    downvotes = sum(1 for vote in votes if vote["type"] == "downvote")
    return upvotes - downvotes


# Compare-and-swap on the vote list so concurrent toggles cannot overwrite each other.
# Returns the stored list, or None when no document matches.
def apply_vote(collection: Collection, doc_filter: dict, user_id: ObjectId, vote_type: str) -> Optional[List[dict]]:
    for attempt in range(1, MAX_VOTE_ATTEMPTS + 1):
        doc = collection.find_one(doc_filter, {"votes": 1})
        if doc is None:
            return None

        current = doc.get("votes")
        updated = toggle_vote(current or [], user_id, vote_type)
        result = collection.update_one(
            # votes=None also matches a document stored without a vote list
            {"_id": doc["_id"], "votes": current},
            {"$set": {"votes": updated, "updatedAt": datetime.now(timezone.utc)}},
        )
        if result.matched_count:
            return updated
        logger.info(f"Vote on {collection.name} {doc['_id']} lost a race (attempt {attempt})")

    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Vote was modified concurrently, please retry")

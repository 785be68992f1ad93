import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.errors import DuplicateKeyError

from stackit.config.auth import create_access_token, get_current_user, hash_password, verify_password
from stackit.config.database import db
from stackit.models.UserModel import AuthResponse, UserCreate, UserLogin, UserProfile, UserPublic, UserUpdate
from stackit.router.documents import default_avatar, format_user, to_object_id

logger = logging.getLogger(__name__)

user_router = APIRouter()


def with_token(user: dict) -> dict:
    profile = format_user(user)
    profile["token"] = create_access_token(data={"sub": str(user["_id"])})
    return profile


# Utility: reject a username or email that belongs to another user
def ensure_unique(username: str = None, email: str = None, exclude_id=None):
    clauses = []
    if username:
        clauses.append({"username": username})
    if email:
        clauses.append({"email": email})
    if not clauses:
        return
    query = {"$or": clauses}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    if db.users.find_one(query):
        raise HTTPException(status_code=400, detail="User already exists")


# Register a new user
@user_router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate):
    ensure_unique(user.username, user.email)

    now = datetime.now(timezone.utc)
    user_data = {
        "username": user.username,
        "email": user.email,
        "password": hash_password(user.password),
        "avatar": default_avatar(user.username),
        "reputation": 0,
        "role": "user",
        "questionsAsked": [],
        "answersGiven": [],
        "isActive": True,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        result = db.users.insert_one(user_data)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")

    user_data["_id"] = result.inserted_id
    logger.info(f"Registered user {user.username} ({result.inserted_id})")
    return with_token(user_data)


@user_router.post("/login", response_model=AuthResponse)
def login(credentials: UserLogin):
    user_data = db.users.find_one({"email": credentials.email, "isActive": True})
    if not user_data or not verify_password(credentials.password, user_data["password"]):
        logger.warning(f"Failed login for {credentials.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return with_token(user_data)


@user_router.get("/me", response_model=UserProfile)
def get_me(current_user: dict = Depends(get_current_user)):
    return format_user(current_user)


@user_router.put("/me", response_model=UserProfile)
def update_me(user: UserUpdate, current_user: dict = Depends(get_current_user)):
    updated_data = user.model_dump(exclude_unset=True, exclude_none=True)
    ensure_unique(updated_data.get("username"), updated_data.get("email"), exclude_id=current_user["_id"])

    if "password" in updated_data:
        updated_data["password"] = hash_password(updated_data["password"])
    updated_data["updatedAt"] = datetime.now(timezone.utc)

    try:
        db.users.update_one({"_id": current_user["_id"]}, {"$set": updated_data})
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")

    updated_user = db.users.find_one({"_id": current_user["_id"]})
    return format_user(updated_user)


@user_router.get("/{user_id}", response_model=UserPublic)
def get_user_by_id(user_id: str):
    user = db.users.find_one({"_id": to_object_id(user_id), "isActive": True})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return format_user(user, include_email=False)

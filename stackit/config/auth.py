import bcrypt
import logging
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Union

from stackit.config.settings import SECRET_KEY, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from stackit.config.database import db

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# Hash password
def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=10)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

# Verify password
def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False

# Create JWT token
def create_access_token(data: dict, expires_delta: timedelta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)

# Decode JWT token
def verify_access_token(token: str) -> Union[dict, None]:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None


# Resolve the bearer token to an active user, without the password hash
def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    not_authorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise not_authorized

    payload = verify_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        logger.warning("Rejected request with an invalid bearer token")
        raise not_authorized

    try:
        user_id = ObjectId(payload["sub"])
    except (InvalidId, TypeError):
        raise not_authorized

    user = db.users.find_one({"_id": user_id, "isActive": True}, {"password": 0})
    if not user:
        logger.warning(f"Token subject {payload['sub']} is unknown or deactivated")
        raise not_authorized
    return user

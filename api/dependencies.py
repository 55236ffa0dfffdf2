"""API Dependencies - Authentication"""
import os

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from domain.auth import UserInDB
from infrastructure.security import decode_access_token, get_password_hash
from api.schemas import TokenData

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

# Operator accounts; passwords are hashed lazily on first lookup
fake_users_db = {
    "admin": {
        "username": "admin",
        "full_name": "Charter Office Admin",
        "email": "admin@example.com",
        "role": "admin",
        "plain_password": os.getenv("ADMIN_PASSWORD", "admin123"),
        "disabled": False,
        "user_id": "123e4567-e89b-12d3-a456-426614174000"
    },
    "skipper": {
        "username": "skipper",
        "full_name": "Dock Operator",
        "email": "dock@example.com",
        "role": "operator",
        "plain_password": os.getenv("OPERATOR_PASSWORD", "skipper123"),
        "disabled": True,
        "user_id": "123e4567-e89b-12d3-a456-426614174001"
    }
}

_password_hash_cache = {}


def _get_hashed_password(username: str) -> str:
    if username not in _password_hash_cache:
        user = fake_users_db.get(username)
        if user and "plain_password" in user:
            _password_hash_cache[username] = get_password_hash(user["plain_password"])
    return _password_hash_cache.get(username, "")


def get_user(db, username: str):
    if username in db:
        user_dict = db[username].copy()
        if "plain_password" in user_dict:
            user_dict["hashed_password"] = _get_hashed_password(username)
            del user_dict["plain_password"]
        return UserInDB(**user_dict)
    return None


async def get_current_user(token: str = Depends(oauth2_scheme)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception
        token_data = TokenData(username=username, role=payload.get("role"))
    except JWTError:
        raise credentials_exception

    user = get_user(fake_users_db, username=token_data.username)
    # Tokens issued before a role change are refused
    if user is None or token_data.role != user.role:
        raise credentials_exception
    return user


async def get_current_active_user(current_user: UserInDB = Depends(get_current_user)):
    if current_user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken
from passlib.context import CryptContext

from backend.settings import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _fernet() -> Fernet:
    settings = get_settings()
    digest = hashlib.sha256(settings.token_secret.encode("utf-8")).digest()
    key = base64.urlsafe_b64encode(digest)
    return Fernet(key)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, stored: str) -> bool:
    return pwd_context.verify(password, stored)


def issue_token(user_id: str) -> str:
    return _fernet().encrypt(user_id.encode("utf-8")).decode("utf-8")


def read_token(token: str) -> str | None:
    settings = get_settings()
    try:
        return _fernet().decrypt(token.encode("utf-8"), ttl=settings.token_ttl_seconds).decode("utf-8")
    except InvalidToken:
        return None

"""Password hashing and bearer-token authentication for users."""

from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, Request
from werkzeug.security import check_password_hash, generate_password_hash

from server.config import settings
from server.db import get_db, transaction


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=settings.password_hash_method)


def verify_password(password: str, stored: str) -> bool:
    return check_password_hash(stored, password)


def hash_token(token: str) -> str:
    """Hash a bearer token for storage. Uses SHA-256."""
    return hashlib.sha256(token.encode()).hexdigest()


async def issue_token(user_id: str) -> str:
    """Mint a bearer token for *user_id* and store its hash with an expiry."""
    token = f"dmd-{uuid.uuid4().hex}"
    now = datetime.now(timezone.utc)
    expires = now + timedelta(seconds=settings.token_ttl_seconds)
    async with transaction() as db:
        await db.execute(
            "INSERT INTO tokens (token_hash, user_id, created_at, expires_at) VALUES (?, ?, ?, ?)",
            (hash_token(token), user_id, now.isoformat(), expires.isoformat()),
        )
    return token


async def verify_token(token: str) -> str | None:
    """Return the user id behind *token*, or None if unknown or expired."""
    db = await get_db()
    cursor = await db.execute(
        "SELECT user_id, expires_at FROM tokens WHERE token_hash = ?",
        (hash_token(token),),
    )
    row = await cursor.fetchone()
    if not row:
        return None
    if datetime.fromisoformat(row["expires_at"]) <= datetime.now(timezone.utc):
        return None
    return row["user_id"]


async def get_current_user(request: Request) -> dict:
    """Extract and validate the user from the Authorization header."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    user_id = await verify_token(auth[7:])
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    db = await get_db()
    cursor = await db.execute("SELECT id, email FROM users WHERE id = ?", (user_id,))
    row = await cursor.fetchone()
    if not row:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return {"id": row["id"], "email": row["email"]}

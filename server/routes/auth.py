"""Auth routes: register, login and the current user."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from server.auth import get_current_user, hash_password, issue_token, verify_password
from server.db import get_db, transaction
from server.models import AuthResponse, LoginRequest, RegisterRequest, UserResponse

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=AuthResponse)
async def register(req: RegisterRequest):
    user_id = str(uuid.uuid4())
    now = datetime.now(timezone.utc).isoformat()
    password_hash = hash_password(req.password)

    # Duplicate check and insert share one unit
    async with transaction() as db:
        cursor = await db.execute("SELECT id FROM users WHERE email = ?", (req.email,))
        if await cursor.fetchone():
            raise HTTPException(status_code=409, detail="Email already registered")
        await db.execute(
            "INSERT INTO users (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
            (user_id, req.email, password_hash, now),
        )

    token = await issue_token(user_id)
    return AuthResponse(token=token, id=user_id, email=req.email)


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest):
    db = await get_db()
    cursor = await db.execute(
        "SELECT id, email, password_hash FROM users WHERE email = ?", (req.email,)
    )
    user = await cursor.fetchone()
    if not user or not verify_password(req.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = await issue_token(user["id"])
    return AuthResponse(token=token, id=user["id"], email=user["email"])


@router.get("/me", response_model=UserResponse)
async def me(user: dict = Depends(get_current_user)):
    return UserResponse(id=user["id"], email=user["email"])

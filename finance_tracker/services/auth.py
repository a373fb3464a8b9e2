import logging
from typing import Optional

import httpx

from finance_tracker.config import settings
from finance_tracker.core.exceptions import ApiError
from finance_tracker.core.security import create_token, hash_password, unusable_password, verify_password
from finance_tracker.schemas.auth import (
    ProfileEnvelope, ProfileOut, ProfileRecord, ProfileUpdate, RegisterRequest,
    TokenResponse, UserOut, UserRecord,
)
from finance_tracker.storage.base import FinanceStore

logger = logging.getLogger(__name__)


def user_out(user: UserRecord) -> UserOut:
    return UserOut(id=user.id, first_name=user.first_name, last_name=user.last_name, email=user.email)


def profile_out(user: UserRecord, profile: Optional[ProfileRecord]) -> ProfileOut:
    extra = profile.model_dump() if profile else {}
    return ProfileOut(id=user.id, first_name=user.first_name, last_name=user.last_name,
                      email=user.email, **extra)


async def fetch_google_profile(access_token: str) -> Optional[dict]:
    """Google userinfo for an OAuth access token, or None if Google rejects it."""
    async with httpx.AsyncClient(timeout=10.0) as client:
        r = await client.get(
            settings.GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
    if r.status_code != 200:
        return None
    return r.json()


class AuthService:
    @staticmethod
    async def register(store: FinanceStore, req: RegisterRequest):
        if not (req.first_name and req.last_name and req.email and req.password):
            raise ApiError(400, "All fields are required")
        if await store.get_user_by_email(req.email):
            raise ApiError(400, "User already exists")

        user = await store.create_user(req.first_name, req.last_name, req.email, hash_password(req.password))
        logger.info("Registered user %s", user.id)
        return user

    @staticmethod
    async def login(store: FinanceStore, email: Optional[str], password: Optional[str]) -> TokenResponse:
        user = await store.get_user_by_email(email) if email else None
        if not user or not password or not verify_password(password, user.password):
            raise ApiError(401, "Invalid credentials")
        return TokenResponse(token=create_token(user.id, user.email), user=user_out(user))

    @staticmethod
    async def google_login(store: FinanceStore, access_token: Optional[str]) -> TokenResponse:
        if not access_token:
            raise ApiError(400, "Missing Google access token")

        profile = await fetch_google_profile(access_token)
        if profile is None:
            raise ApiError(401, "Invalid Google token")
        email = profile.get("email")
        if not email:
            raise ApiError(400, "Unable to retrieve Google user email")

        user = await store.get_user_by_email(email)
        if not user:
            user = await store.create_user(
                profile.get("given_name") or "Google",
                profile.get("family_name") or "User",
                email,
                unusable_password(),
            )
            logger.info("Created user %s from Google sign-in", user.id)
        return TokenResponse(token=create_token(user.id, user.email), user=user_out(user))

    @staticmethod
    async def get_profile(store: FinanceStore, user_id: int) -> Optional[ProfileOut]:
        user = await store.get_user(user_id)
        if not user:
            return None
        return profile_out(user, await store.get_profile(user_id))

    @staticmethod
    async def update_profile(store: FinanceStore, user_id: int, req: ProfileUpdate) -> Optional[ProfileEnvelope]:
        user = await store.get_user(user_id)
        if not user:
            return None
        if req.first_name or req.last_name:
            user = await store.update_user_names(user_id, req.first_name, req.last_name)

        profile = await store.upsert_profile(user_id, ProfileRecord(
            phone=req.phone or None,
            company=req.company or None,
            bio=req.bio or None,
            profile_photo=req.profile_photo or None,
        ))
        return ProfileEnvelope(user=profile_out(user, profile))

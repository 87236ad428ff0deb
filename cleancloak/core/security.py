# cleancloak/core/security.py

from fastapi import Response
from fastapi.concurrency import run_in_threadpool
from passlib.context import CryptContext
from cleancloak.core.config import Settings, settings

SESSION_COOKIE_NAME = "token"
LOGOUT_COOKIE_VALUE = "none"
LOGOUT_COOKIE_MAX_AGE = 10

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


async def hash_password(plain_password: str) -> str:
    return await run_in_threadpool(pwd_context.hash, plain_password)


async def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return await run_in_threadpool(pwd_context.verify, plain_password, hashed_password)


async def dummy_verify() -> None:
    # Equalizes timing when the account does not exist.
    await run_in_threadpool(pwd_context.dummy_verify)


def set_session_cookie(response: Response, token: str, cfg: Settings = settings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=cfg.session_max_age,
        path="/",
        httponly=True,
        secure=cfg.is_production,
        samesite="none" if cfg.is_production else "lax",
    )


def clear_session_cookie(response: Response, cfg: Settings = settings) -> None:
    # Same attributes as the session cookie so cross-site clients accept the overwrite.
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=LOGOUT_COOKIE_VALUE,
        max_age=LOGOUT_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=cfg.is_production,
        samesite="none" if cfg.is_production else "lax",
    )

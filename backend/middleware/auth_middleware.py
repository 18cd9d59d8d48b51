# backend/middleware/auth_middleware.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt  # PyJWT
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from backend.config import JWT_ALGO, JWT_EXPIRES_MIN, JWT_LEEWAY_SEC, JWT_SECRET

# NOTE: auto_error=False so we can consistently return 401 on problems
security = HTTPBearer(auto_error=False)

# ---------- PUBLIC ALLOW-LIST (no auth required) ----------
PUBLIC_PATHS = {
    "/", "/health", "/openapi.json", "/docs", "/redoc",
    "/api/v1/profile/test",
    "/api/v1/profile/all",
}
PUBLIC_PREFIXES = (
    "/api/v1/profile/handle/",
    "/api/v1/profile/user/",
)

# ---------- Token creation ----------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

def create_access_token(sub: str, extra: Optional[Dict[str, Any]] = None, minutes: Optional[int] = None) -> str:
    """
    Create a short-lived ACCESS token.
    `sub` should be the account's stable id (string).
    """
    if not isinstance(sub, str) or not sub.strip():
        raise ValueError("sub must be a non-empty string")

    exp_min = minutes if minutes is not None else JWT_EXPIRES_MIN
    now = _now_utc()
    payload: Dict[str, Any] = {
        "sub": sub,
        "typ": "access",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=exp_min)).timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGO)

# ---------- Token decoding / validation ----------
def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode & validate token. Raises 401 on any auth failure.
    """
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGO], leeway=JWT_LEEWAY_SEC)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

# ---------- FastAPI dependencies ----------
def require_claims(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Dict[str, Any]:
    """
    Strict auth dependency. Returns the validated claims dict.
    Always raises 401 (not 403) if header is missing/invalid.
    """
    if credentials is None or not credentials.scheme or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    token = (credentials.credentials or "").strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing token")

    return decode_token(token)

def require_user_id(claims: Dict[str, Any] = Depends(require_claims)) -> int:
    """
    Returns the authenticated owner id (the `sub` claim) as an int.
    """
    sub = claims.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token subject")

# ---------- Starlette middleware (allow-list + bearer enforcement) ----------
class AuthMiddleware(BaseHTTPMiddleware):
    """
    Request-level guard: lets public paths through; enforces Bearer on others.
    Also exposes decoded claims via request.state.claims.
    """
    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        # Always allow CORS preflights
        if request.method.upper() == "OPTIONS":
            return await call_next(request)

        if (
            path in PUBLIC_PATHS
            or (path.endswith("/") and path[:-1] in PUBLIC_PATHS)
            or path.startswith(PUBLIC_PREFIXES)
        ):
            return await call_next(request)

        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return JSONResponse({"detail": "Not authenticated"}, status_code=401)

        try:
            request.state.claims = decode_token(auth.split(" ", 1)[1].strip())
        except HTTPException as e:
            return JSONResponse({"detail": e.detail}, status_code=e.status_code)

        return await call_next(request)

__all__ = [
    "create_access_token", "decode_token",
    "require_claims", "require_user_id",
    "PUBLIC_PATHS", "PUBLIC_PREFIXES", "AuthMiddleware",
]

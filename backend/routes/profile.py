# backend/routes/profile.py
from __future__ import annotations
from typing import List, Dict, Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import logging

from backend.database import get_db
from backend.errors import (
    AccountRemovalFailed,
    ConcurrentModification,
    HandleTaken,
    NotFound,
    ProfileError,
    StoreUnavailable,
    ValidationFailed,
)
from backend.middleware.auth_middleware import require_user_id
from backend.schemas_profile import ProfileOut
from backend.services import profile_service
from backend.utils.retry import retry_on_unavailable
from backend.validation import (
    validate_education_input,
    validate_experience_input,
    validate_profile_input,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])

# ---- Error rendering ----
# Checked in order; subclasses inherit their parent's status
ERROR_STATUS = (
    (ValidationFailed, 400),
    (HandleTaken, 400),
    (NotFound, 404),
    (ConcurrentModification, 409),
    (StoreUnavailable, 503),
    (AccountRemovalFailed, 500),
)

def status_for(err: ProfileError) -> int:
    for kind, code in ERROR_STATUS:
        if isinstance(err, kind):
            return code
    return 500

async def profile_error_handler(request: Request, exc: ProfileError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(exc.to_dict(), status_code=code)

# ---- Routes ----
@router.get("/test")
def profile_test():
    return {"msg": "Profile works"}

@router.get("", response_model=ProfileOut)
def read_my_profile(
    db: Session = Depends(get_db),
    uid: int = Depends(require_user_id),
):
    return retry_on_unavailable(profile_service.get_own_profile, db, uid)

@router.get("/all", response_model=List[ProfileOut])
def read_all_profiles(db: Session = Depends(get_db)):
    return retry_on_unavailable(profile_service.list_profiles, db)

@router.get("/handle/{handle}", response_model=ProfileOut)
def read_profile_by_handle(handle: str, db: Session = Depends(get_db)):
    return retry_on_unavailable(profile_service.get_profile_by_handle, db, handle)

@router.get("/user/{user_id}", response_model=ProfileOut)
def read_profile_by_user(user_id: int, db: Session = Depends(get_db)):
    return retry_on_unavailable(profile_service.get_profile_by_owner, db, user_id)

@router.post("", response_model=ProfileOut)
def upsert_profile(
    body: Dict[str, Any] = Body(default={}),
    db: Session = Depends(get_db),
    uid: int = Depends(require_user_id),
):
    """
    Create the caller's profile, or merge the given fields into it.
    Only fields present (and non-blank) in the body are written.
    """
    return profile_service.upsert_profile(db, uid, validate_profile_input(body))

@router.post("/experience", response_model=ProfileOut)
def add_experience(
    body: Dict[str, Any] = Body(default={}),
    db: Session = Depends(get_db),
    uid: int = Depends(require_user_id),
):
    return profile_service.add_experience(db, uid, validate_experience_input(body))

@router.post("/education", response_model=ProfileOut)
def add_education(
    body: Dict[str, Any] = Body(default={}),
    db: Session = Depends(get_db),
    uid: int = Depends(require_user_id),
):
    return profile_service.add_education(db, uid, validate_education_input(body))

@router.delete("/experience/{exp_id}", response_model=ProfileOut)
def delete_experience(
    exp_id: str,
    db: Session = Depends(get_db),
    uid: int = Depends(require_user_id),
):
    return profile_service.remove_experience(db, uid, exp_id)

@router.delete("/education/{edu_id}", response_model=ProfileOut)
def delete_education(
    edu_id: str,
    db: Session = Depends(get_db),
    uid: int = Depends(require_user_id),
):
    return profile_service.remove_education(db, uid, edu_id)

@router.delete("")
def delete_profile_and_account(
    db: Session = Depends(get_db),
    uid: int = Depends(require_user_id),
):
    """Delete the caller's profile and then their account."""
    return profile_service.delete_profile_and_account(db, uid)

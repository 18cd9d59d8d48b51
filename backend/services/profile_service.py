# backend/services/profile_service.py
"""
Profile identity & mutation rules.

- upsert: create-or-update by owner, with handle uniqueness
- experience / education: newest-first embedded lists, edited with
  compare-and-swap on the profile version so concurrent edits are not lost
- cascade delete: profile first, then the owning account
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.config import SUBCOLLECTION_MAX_ATTEMPTS
from backend.errors import (
    AccountRemovalFailed,
    ConcurrentModification,
    DuplicateHandle,
    DuplicateOwner,
    HandleTaken,
    NotFound,
    ProfileNotFound,
    ValidationFailed,
)
from backend.models import Profile
from backend.services.profile_store import SCALAR_FIELDS, ProfileStore
from backend.services.subcollections import (
    build_entry,
    new_entry_id,
    prepend_entry,
    remove_entry,
    split_skills,
)
from backend.utils.users import delete_user
from backend.validation import SOCIAL_PLATFORMS, ValidationResult

logger = logging.getLogger(__name__)


# ---- Helpers ----
def _require_valid(result: ValidationResult) -> None:
    if not result.is_valid:
        raise ValidationFailed(result.errors)


def build_profile_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a validated request body into the sparse field set to persist.
    Only non-empty values count as "set"; `social` only holds the platforms given.
    """
    fields: Dict[str, Any] = {k: raw[k] for k in SCALAR_FIELDS if raw.get(k)}

    if raw.get("skills") is not None:
        fields["skills"] = split_skills(raw["skills"])

    social = {p: raw[p] for p in SOCIAL_PLATFORMS if raw.get(p)}
    if social:
        fields["social"] = social
    return fields


def _with_version_retry(
    store: ProfileStore,
    owner: Any,
    write: Callable[[Profile], Any],
    missing: Callable[[], Exception],
    max_attempts: int,
    current: Optional[Profile] = None,
):
    """
    Run `write` against the freshest copy of the owner's profile until it
    lands (truthy result) or `max_attempts` version races have been lost.
    """
    for attempt in range(1, max_attempts + 1):
        if current is None:
            current = store.find_by_owner(owner)
            if current is None:
                raise missing()
        result = write(current)
        if result:
            return result
        logger.info("profile version race lost owner=%s attempt=%d/%d", owner, attempt, max_attempts)
        current = None
    raise ConcurrentModification()


# ---- Reads ----
def get_profile_by_owner(db: Session, owner: Any) -> Dict[str, Any]:
    store = ProfileStore(db)
    profile = store.find_by_owner(owner)
    if profile is None:
        raise NotFound()
    return store.to_document(profile)


get_own_profile = get_profile_by_owner


def get_profile_by_handle(db: Session, handle: str) -> Dict[str, Any]:
    store = ProfileStore(db)
    profile = store.find_by_handle(handle)
    if profile is None:
        raise NotFound()
    return store.to_document(profile)


def list_profiles(db: Session) -> List[Dict[str, Any]]:
    store = ProfileStore(db)
    return store.to_documents(store.list_all())


# ---- Upsert ----
def _create(store: ProfileStore, owner: Any, fields: Dict[str, Any]) -> Optional[Profile]:
    handle = fields.get("handle")
    if handle:
        holder = store.find_by_handle(handle)
        if holder is not None:
            if holder.user_id != owner:
                raise HandleTaken()
            # our own profile appeared since the owner lookup
            return None
    try:
        return store.insert(owner, fields)
    except DuplicateHandle as e:
        # Another request took the handle between our check and the insert
        raise HandleTaken(original_error=e) from e
    except DuplicateOwner:
        logger.info("concurrent create for owner=%s, falling back to update", owner)
        return None


def _update(store: ProfileStore, owner: Any, fields: Dict[str, Any], max_attempts: int,
            current: Optional[Profile] = None) -> Profile:
    def write(profile: Profile):
        values = dict(fields)
        if "social" in values:
            values["social"] = {**(profile.social or {}), **values["social"]}
        try:
            return store.update(owner, values, expected_version=profile.version)
        except DuplicateHandle as e:
            raise HandleTaken(original_error=e) from e

    return _with_version_retry(store, owner, write, NotFound, max_attempts, current=current)


def upsert_profile(db: Session, owner: Any, result: ValidationResult,
                   max_attempts: int = SUBCOLLECTION_MAX_ATTEMPTS) -> Dict[str, Any]:
    """
    Create the owner's profile on first call, merge the given fields afterwards.
    Never touches experience/education.
    """
    _require_valid(result)
    fields = build_profile_fields(result.fields)
    store = ProfileStore(db)

    existing = store.find_by_owner(owner)
    if existing is None:
        created = _create(store, owner, fields)
        if created is not None:
            return store.to_document(created)

    return store.to_document(_update(store, owner, fields, max_attempts, current=existing))


# ---- Sub-collections ----
def _edit_subcollection(db: Session, owner: Any, name: str,
                        mutate: Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]],
                        max_attempts: int) -> Dict[str, Any]:
    store = ProfileStore(db)

    def write(profile: Profile) -> bool:
        entries = mutate(list(getattr(profile, name) or []))
        return store.replace_subcollection(owner, name, entries, profile.version)

    _with_version_retry(store, owner, write, ProfileNotFound, max_attempts)

    profile = store.find_by_owner(owner)
    if profile is None:
        raise ProfileNotFound()
    return store.to_document(profile)


def _add_entry(db: Session, owner: Any, kind: str, result: ValidationResult, max_attempts: int) -> Dict[str, Any]:
    _require_valid(result)
    # id is fixed before any retry so the entry keeps a single identity
    entry = build_entry(kind, result.fields, new_entry_id())
    doc = _edit_subcollection(db, owner, kind, lambda entries: prepend_entry(entries, entry), max_attempts)
    logger.info("%s entry %s added for owner=%s", kind, entry["id"], owner)
    return doc


def _remove_entry(db: Session, owner: Any, kind: str, entry_id: Any, max_attempts: int) -> Dict[str, Any]:
    return _edit_subcollection(db, owner, kind, lambda entries: remove_entry(entries, entry_id), max_attempts)


def add_experience(db: Session, owner: Any, result: ValidationResult,
                   max_attempts: int = SUBCOLLECTION_MAX_ATTEMPTS) -> Dict[str, Any]:
    return _add_entry(db, owner, "experience", result, max_attempts)


def add_education(db: Session, owner: Any, result: ValidationResult,
                  max_attempts: int = SUBCOLLECTION_MAX_ATTEMPTS) -> Dict[str, Any]:
    return _add_entry(db, owner, "education", result, max_attempts)


def remove_experience(db: Session, owner: Any, entry_id: Any,
                      max_attempts: int = SUBCOLLECTION_MAX_ATTEMPTS) -> Dict[str, Any]:
    return _remove_entry(db, owner, "experience", entry_id, max_attempts)


def remove_education(db: Session, owner: Any, entry_id: Any,
                     max_attempts: int = SUBCOLLECTION_MAX_ATTEMPTS) -> Dict[str, Any]:
    return _remove_entry(db, owner, "education", entry_id, max_attempts)


# ---- Cascade delete ----
def delete_profile_and_account(db: Session, owner: Any) -> Dict[str, bool]:
    """
    Remove the owner's profile, then their account. The two steps are not
    atomic: if the second fails the account is left orphaned and
    AccountRemovalFailed is raised so it can be found and cleaned up.
    """
    store = ProfileStore(db)
    if store.find_by_owner(owner) is None:
        raise NotFound()
    store.delete(owner)

    try:
        removed = delete_user(db, owner)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("orphaned account: profile removed but account delete failed owner=%s: %s", owner, e)
        raise AccountRemovalFailed(owner, original_error=e) from e

    if not removed:
        logger.warning("account already absent after profile delete owner=%s", owner)
    return {"success": True}

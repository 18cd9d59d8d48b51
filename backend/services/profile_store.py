# backend/services/profile_store.py
"""
Durable storage for profile rows.

Every mutating method issues exactly one INSERT/UPDATE/DELETE against a
single profile row and commits it, so a profile is never left half written.
Database failures are translated into the errors in `backend.errors`.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as SQLAlchemyTimeoutError,
)
from sqlalchemy.orm import Session

from backend.errors import DuplicateHandle, DuplicateOwner, NotFound, StoreUnavailable
from backend.models import Profile
from backend.utils.users import get_owner_summaries

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("handle", "company", "website", "location", "bio", "status", "githubusername")
SUBCOLLECTIONS = ("experience", "education")

_UNAVAILABLE = (OperationalError, InterfaceError, DisconnectionError, SQLAlchemyTimeoutError)

# Unique constraints by Postgres name and by SQLite column
DUPLICATE_CONSTRAINTS = {
    "uq_profiles_handle": DuplicateHandle,
    "profiles.handle": DuplicateHandle,
    "uq_profiles_user_id": DuplicateOwner,
    "profiles.user_id": DuplicateOwner,
}


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


class ProfileStore:
    def __init__(self, db: Session):
        self.db = db

    # ---------- error translation ----------
    @contextmanager
    def _translate(self, op: str, owner: Any = None):
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            duplicate = self._duplicate_error(e, owner)
            if duplicate is None:
                raise
            raise duplicate from e
        except _UNAVAILABLE as e:
            self.db.rollback()
            logger.error("profile store unavailable during %s (owner=%s): %s", op, owner, e)
            raise StoreUnavailable(original_error=e) from e

    @staticmethod
    def _violated_constraint(err: IntegrityError) -> Optional[str]:
        orig = getattr(err, "orig", None)
        # psycopg2 reports the constraint by name
        name = getattr(getattr(orig, "diag", None), "constraint_name", None)
        if name:
            return name
        # SQLite: "UNIQUE constraint failed: profiles.handle"
        detail = str(orig if orig is not None else err)
        if detail.startswith("UNIQUE constraint failed:"):
            return detail.split(":", 1)[1].strip()
        return None

    @classmethod
    def _duplicate_error(cls, err: IntegrityError, owner: Any) -> Optional[Exception]:
        kind = DUPLICATE_CONSTRAINTS.get(cls._violated_constraint(err))
        if kind is None:
            # FK to users, NOT NULL and so on are not ours to interpret
            return None
        logger.info("%s rejected write for owner=%s", kind.__name__, owner)
        return kind(original_error=err)

    # ---------- reads ----------
    def find_by_owner(self, owner: Any) -> Optional[Profile]:
        with self._translate("find_by_owner", owner):
            return self.db.query(Profile).filter(Profile.user_id == owner).first()

    def find_by_handle(self, handle: str) -> Optional[Profile]:
        with self._translate("find_by_handle"):
            return self.db.query(Profile).filter(Profile.handle == handle).first()

    def list_all(self) -> List[Profile]:
        with self._translate("list_all"):
            return (
                self.db.query(Profile)
                .order_by(Profile.created_at.desc(), Profile.id.desc())
                .all()
            )

    # ---------- writes ----------
    def insert(self, owner: Any, fields: Dict[str, Any]) -> Profile:
        """
        Create the owner's profile with empty sub-collections.
        Raises DuplicateHandle / DuplicateOwner when a unique index rejects it.
        """
        profile = Profile(
            user_id=owner,
            skills=list(fields.get("skills") or []),
            social=dict(fields.get("social") or {}),
            experience=[],
            education=[],
            version=1,
            **{k: fields[k] for k in SCALAR_FIELDS if k in fields},
        )
        with self._translate("insert", owner):
            self.db.add(profile)
            self.db.commit()
            self.db.refresh(profile)
        logger.info("profile created for owner=%s handle=%r", owner, profile.handle)
        return profile

    def update(self, owner: Any, fields: Dict[str, Any], expected_version: Optional[int] = None) -> Optional[Profile]:
        """
        Merge `fields` into the owner's row in a single UPDATE.

        With `expected_version`, the write only applies if the stored version
        still matches; a mismatch returns None. Raises NotFound if the owner
        has no profile.
        """
        values = {k: v for k, v in fields.items() if k not in SUBCOLLECTIONS}
        values["version"] = Profile.version + 1

        with self._translate("update", owner):
            q = self.db.query(Profile).filter(Profile.user_id == owner)
            if expected_version is not None:
                q = q.filter(Profile.version == expected_version)
            changed = q.update(values, synchronize_session=False)
            if not changed:
                self.db.rollback()
                if self.find_by_owner(owner) is None:
                    raise NotFound()
                logger.debug("update lost version race owner=%s expected=%s", owner, expected_version)
                return None
            self.db.commit()
        return self.find_by_owner(owner)

    def replace_subcollection(self, owner: Any, name: str, entries: List[Dict[str, Any]], expected_version: int) -> bool:
        """
        Compare-and-swap one embedded list. Returns False when the row changed
        since `expected_version` was read (or disappeared).
        """
        if name not in SUBCOLLECTIONS:
            raise ValueError(f"Unknown sub-collection '{name}'")

        with self._translate("replace_subcollection", owner):
            changed = (
                self.db.query(Profile)
                .filter(Profile.user_id == owner, Profile.version == expected_version)
                .update(
                    {getattr(Profile, name): list(entries), Profile.version: Profile.version + 1},
                    synchronize_session=False,
                )
            )
            if not changed:
                self.db.rollback()
                return False
            self.db.commit()
        return True

    def delete(self, owner: Any) -> None:
        with self._translate("delete", owner):
            removed = (
                self.db.query(Profile)
                .filter(Profile.user_id == owner)
                .delete(synchronize_session=False)
            )
            if not removed:
                self.db.rollback()
                raise NotFound()
            self.db.commit()
        logger.info("profile deleted for owner=%s", owner)

    # ---------- documents ----------
    def to_documents(self, profiles: Iterable[Profile]) -> List[Dict[str, Any]]:
        """Serialise profiles, joining each owner's name and avatar in one lookup."""
        profiles = list(profiles)
        with self._translate("owner_join"):
            owners = get_owner_summaries(self.db, (p.user_id for p in profiles))
        return [self._document(p, owners.get(p.user_id)) for p in profiles]

    def to_document(self, profile: Profile) -> Dict[str, Any]:
        return self.to_documents([profile])[0]

    @staticmethod
    def _document(profile: Profile, owner: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "id": profile.id,
            "user": owner or {"id": profile.user_id, "name": None, "avatar": None},
        }
        for name in SCALAR_FIELDS:
            doc[name] = getattr(profile, name)
        doc["skills"] = list(profile.skills or [])
        doc["social"] = dict(profile.social or {})
        doc["experience"] = list(profile.experience or [])
        doc["education"] = list(profile.education or [])
        doc["version"] = profile.version
        doc["created_at"] = _iso(profile.created_at)
        doc["updated_at"] = _iso(profile.updated_at)
        return doc

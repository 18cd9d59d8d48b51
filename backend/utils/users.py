# backend/utils/users.py
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from backend.models import User


# ===========================
# Lookup helpers (ORM)
# ===========================

def owner_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    """The public slice of an account that is joined into profile documents."""
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "avatar": user.avatar}


def get_owner_summaries(db: Session, user_ids: Iterable[Any]) -> Dict[Any, Dict[str, Any]]:
    """
    Batch version of `owner_summary` keyed by user id.
    Ids without an account are simply absent from the result.
    """
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    rows = db.query(User).filter(User.id.in_(ids)).all()
    return {u.id: owner_summary(u) for u in rows}


# ===========================
# Removal
# ===========================

def delete_user(db: Session, user_id: Any) -> bool:
    """
    Delete a user by id in one statement and commit.
    Returns True if a row was removed, False if no such user.
    """
    removed = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
    db.commit()
    return bool(removed)

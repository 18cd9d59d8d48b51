# backend/services/subcollections.py
"""Pure list edits for the embedded experience/education lists (newest first)."""
from __future__ import annotations

import uuid
from typing import Any, Dict, List

EXPERIENCE_KEYS = ("title", "company", "location", "from", "to", "current", "description")
EDUCATION_KEYS = ("school", "degree", "fieldofstudy", "from", "to", "current", "description")

ENTRY_KEYS = {
    "experience": EXPERIENCE_KEYS,
    "education": EDUCATION_KEYS,
}


def new_entry_id() -> str:
    return uuid.uuid4().hex


def build_entry(kind: str, fields: Dict[str, Any], entry_id: str) -> Dict[str, Any]:
    """Shape an entry with every known key present; unknown keys are dropped."""
    entry: Dict[str, Any] = {"id": entry_id}
    for key in ENTRY_KEYS[kind]:
        entry[key] = fields.get(key)
    entry["current"] = bool(entry["current"])
    return entry


def prepend_entry(entries: List[Dict[str, Any]], entry: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [dict(entry)] + [dict(e) for e in (entries or [])]


def remove_entry(entries: List[Dict[str, Any]], entry_id: Any) -> List[Dict[str, Any]]:
    # ids are compared as strings; an unknown id leaves the list as it was
    target = str(entry_id)
    return [dict(e) for e in (entries or []) if str(e.get("id")) != target]


def split_skills(raw: Any) -> List[str]:
    """'a,b' -> ['a', 'b'] with no trimming or filtering; lists pass through."""
    if isinstance(raw, str):
        return raw.split(",")
    return [str(s) for s in raw]

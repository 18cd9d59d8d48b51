# backend/errors.py
"""
Failure kinds raised by the profile core.

Each error carries a `field` and a user-facing `message` so the HTTP layer
can render the `{field: message}` bodies clients already expect.
"""
from __future__ import annotations

from typing import Dict, Optional


class ProfileError(Exception):
    """Base class for every failure the profile core surfaces."""

    field = "error"
    default_message = "Profile operation failed"

    def __init__(self, message: Optional[str] = None, original_error: Optional[Exception] = None) -> None:
        self.message = message or self.default_message
        self.original_error = original_error
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, str]:
        return {self.field: self.message}


class NotFound(ProfileError):
    field = "noprofile"
    default_message = "There is no profile for this user"


class ProfileNotFound(NotFound):
    """Sub-collection edit attempted before the owner created a profile."""

    default_message = "Create a profile before adding or removing entries"


class HandleTaken(ProfileError):
    field = "handle"
    default_message = "That handle already exists"


class ValidationFailed(ProfileError):
    default_message = "Invalid input"

    def __init__(self, errors: Dict[str, str]) -> None:
        super().__init__(self.default_message)
        self.errors = dict(errors)

    def to_dict(self) -> Dict[str, str]:
        return dict(self.errors)


class StoreUnavailable(ProfileError):
    field = "store"
    default_message = "Profile store is unavailable"


class ConcurrentModification(ProfileError):
    field = "profile"
    default_message = "Profile was modified concurrently, please retry"


class AccountRemovalFailed(ProfileError):
    """Profile was deleted but the owning account could not be removed."""

    field = "account"
    default_message = "Profile removed but account removal failed"

    def __init__(self, owner: int, original_error: Optional[Exception] = None) -> None:
        super().__init__(original_error=original_error)
        self.owner = owner


# --- store-level uniqueness violations (translated by the controllers) ---
class DuplicateHandle(ProfileError):
    field = "handle"
    default_message = "Handle index rejected the write"


class DuplicateOwner(ProfileError):
    field = "user"
    default_message = "Owner already has a profile"

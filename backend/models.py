# backend/models.py
from __future__ import annotations

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func as sa_func

from backend.database import Base

# JSONB on Postgres, plain JSON elsewhere (e.g., SQLite in dev/tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# =======================
# User (account) model
# =======================
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    avatar = Column(String(512), nullable=True)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, nullable=False, server_default=sa_func.now())
    updated_at = Column(DateTime, nullable=False, server_default=sa_func.now(), onupdate=sa_func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"


# =======================
# Profile model
# =======================
class Profile(Base):
    """
    One row per account. The row is the unit of atomicity: every write to it
    is a single UPDATE/INSERT/DELETE statement, and `version` is bumped on
    each write so sub-collection edits can compare-and-swap.
    """
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    handle   = Column(String(40), nullable=True)
    company  = Column(String(255), nullable=True)
    website  = Column(String(512), nullable=True)
    location = Column(String(255), nullable=True)
    bio      = Column(Text, nullable=True)
    status   = Column(String(255), nullable=True)
    githubusername = Column(String(255), nullable=True)

    # Arrays/objects
    skills     = Column(JSONType, nullable=False, default=list)
    social     = Column(JSONType, nullable=False, default=dict)
    experience = Column(JSONType, nullable=False, default=list)
    education  = Column(JSONType, nullable=False, default=list)

    version = Column(Integer, nullable=False, default=1, server_default="1")

    created_at = Column(DateTime, nullable=False, server_default=sa_func.now())
    updated_at = Column(DateTime, nullable=False, server_default=sa_func.now(), onupdate=sa_func.now())

    # Names matter: the store reads them back out of IntegrityError messages
    __table_args__ = (
        UniqueConstraint("user_id", name="uq_profiles_user_id"),
        UniqueConstraint("handle", name="uq_profiles_handle"),
        Index("ix_profiles_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id} user_id={self.user_id} handle={self.handle!r}>"

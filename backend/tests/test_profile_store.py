from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from backend.errors import DuplicateHandle, DuplicateOwner
from backend.services.profile_store import ProfileStore


class PgError(Exception):
    """Stand-in for a psycopg2 error: carries `diag.constraint_name`."""

    def __init__(self, message, constraint_name):
        super().__init__(message)
        self.diag = SimpleNamespace(constraint_name=constraint_name)


def integrity_error(orig):
    return IntegrityError("INSERT INTO profiles ...", {}, orig)


def test_sqlite_unique_violations_map_to_duplicates():
    handle = integrity_error(Exception("UNIQUE constraint failed: profiles.handle"))
    owner = integrity_error(Exception("UNIQUE constraint failed: profiles.user_id"))
    assert isinstance(ProfileStore._duplicate_error(handle, 1), DuplicateHandle)
    assert isinstance(ProfileStore._duplicate_error(owner, 1), DuplicateOwner)


def test_postgres_constraint_names_map_to_duplicates():
    handle = integrity_error(PgError("duplicate key value violates unique constraint", "uq_profiles_handle"))
    owner = integrity_error(PgError("duplicate key value violates unique constraint", "uq_profiles_user_id"))
    assert isinstance(ProfileStore._duplicate_error(handle, 1), DuplicateHandle)
    assert isinstance(ProfileStore._duplicate_error(owner, 1), DuplicateOwner)


def test_foreign_key_violation_is_not_a_duplicate():
    pg_fk = integrity_error(PgError(
        'insert or update on table "profiles" violates foreign key constraint "profiles_user_id_fkey"\n'
        'DETAIL:  Key (user_id)=(7) is not present in table "users".',
        "profiles_user_id_fkey",
    ))
    sqlite_fk = integrity_error(Exception("FOREIGN KEY constraint failed"))
    not_null = integrity_error(Exception("NOT NULL constraint failed: profiles.user_id"))

    for err in (pg_fk, sqlite_fk, not_null):
        assert ProfileStore._duplicate_error(err, 7) is None


def test_insert_reraises_foreign_key_violation(db, monkeypatch):
    store = ProfileStore(db)
    fk = integrity_error(PgError("violates foreign key constraint", "profiles_user_id_fkey"))

    def failing_commit():
        raise fk

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(IntegrityError) as exc:
        store.insert(7, {"handle": "ghost"})
    assert exc.value is fk


def test_insert_on_real_index_reports_duplicate_owner(db, make_user):
    owner = make_user()
    store = ProfileStore(db)
    store.insert(owner, {"handle": "first"})
    with pytest.raises(DuplicateOwner):
        store.insert(owner, {"handle": "second"})
    with pytest.raises(DuplicateHandle):
        store.insert(make_user(), {"handle": "first"})

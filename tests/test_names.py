"""
Tests for name resolution.
"""
from uuid import UUID

from pkgregistry.crud import create_package, get_pointer, list_names, rename_package
from pkgregistry.crud.names import name_taken, normalize_name, resolve_pointer


def test_normalize_name():
    assert normalize_name("  Language-CSS ") == "language-css"
    assert normalize_name(None) == ""


def test_resolve_unknown_name_returns_none(db):
    assert resolve_pointer(db, "not-a-package") is None


def test_get_pointer_not_found(db):
    result = get_pointer(db, "not-a-package")
    assert result.ok is False
    assert result.short == "Not Found"


def test_resolution_is_case_insensitive(db, make_package):
    created = create_package(db, make_package("language-css"))
    assert created.ok

    assert resolve_pointer(db, "Language-CSS") == UUID(created.content)
    assert get_pointer(db, "LANGUAGE-CSS").content == created.content


def test_old_and_new_names_share_a_pointer(db, make_package):
    pointer = create_package(db, make_package("first-name")).content
    assert rename_package(db, "second-name", "first-name").ok
    assert rename_package(db, "third-name", "second-name").ok

    for name in ("first-name", "second-name", "third-name"):
        assert get_pointer(db, name).content == pointer
        assert name_taken(db, name)

    history = list_names(db, "first-name")
    assert history.ok
    assert history.content == ["first-name", "second-name", "third-name"]

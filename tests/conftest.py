"""
Shared fixtures: a fresh SQLite registry per test.
"""
import pytest

from pkgregistry.core.database import Database
from pkgregistry.core.schemas import NewPackage, UserProfile, VersionDescriptor


@pytest.fixture(scope="function")
def database(tmp_path):
    """Create fresh database for each test."""
    database = Database(f"sqlite:///{tmp_path / 'test_registry.db'}")
    database.init_db()
    yield database
    database.drop_db()
    database.dispose()


@pytest.fixture
def db(database):
    """Session bound to the test database."""
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_package():
    """Build a NewPackage with sensible defaults."""

    def _make(name="package-a", versions=("1.0.0",), **overrides):
        fields = {
            "name": name,
            "repository": {"type": "git", "url": f"https://github.com/pulsar-edit/{name}"},
            "readme": f"Readme of {name}",
            "creation_method": "Test Package",
            "owner": "pulsar-edit",
            "metadata": {"name": name, "version": versions[-1]},
            "versions": [
                VersionDescriptor(
                    semver=semver,
                    engine={"atom": "*"},
                    meta={"name": name, "version": semver},
                )
                for semver in versions
            ],
        }
        fields.update(overrides)
        return NewPackage(**fields)

    return _make


@pytest.fixture
def profile():
    return UserProfile(
        username="dever",
        node_id="dever-nodeid",
        avatar="https://roadtonowhere.com",
    )

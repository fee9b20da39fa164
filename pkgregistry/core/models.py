"""
Database models for the package registry.
Packages are identified by an immutable pointer; names, versions and stars hang off it.
"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")

PACKAGE_TYPES = ("package", "theme")
VERSION_STATUSES = ("latest", "published")
DEFAULT_LICENSE = "NONE"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Package(Base):
    """Package table; one row per pointer."""
    __tablename__ = "packages"

    pointer = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(128), nullable=False, unique=True)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    creation_method = Column(String(128), nullable=True)
    downloads = Column(BigInteger, nullable=False, default=0)
    stargazers_count = Column(BigInteger, nullable=False, default=0)
    original_stargazers = Column(BigInteger, nullable=False, default=0)
    package_type = Column(Enum(*PACKAGE_TYPES, name="packagetype"), nullable=False, default="package")
    data = Column(JSONDocument, nullable=True)  # name, readme, repository, metadata, owner

    # Relationships
    names = relationship("Name", cascade="all, delete-orphan", passive_deletes=True)
    versions = relationship(
        "Version",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Version.id",
    )
    stars = relationship("Star", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("name = lower(name)", name="lowercase_names"),
        CheckConstraint("downloads >= 0", name="downloads_not_negative"),
        CheckConstraint("stargazers_count >= 0", name="stargazers_not_negative"),
        CheckConstraint("original_stargazers >= 0", name="original_stargazers_not_negative"),
    )


class Name(Base):
    """Every name a package has ever had, current one included."""
    __tablename__ = "names"

    name = Column(String(128), primary_key=True)
    pointer = Column(
        Uuid(as_uuid=True),
        ForeignKey("packages.pointer", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        CheckConstraint("name = lower(name)", name="lowercase_history_names"),
    )


class Version(Base):
    """Version table. Exactly one row per package carries status 'latest'."""
    __tablename__ = "versions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    package = Column(
        Uuid(as_uuid=True),
        ForeignKey("packages.pointer", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(Enum(*VERSION_STATUSES, name="versionstatus"), nullable=False)
    semver = Column(String(256), nullable=False)
    license = Column(Text, nullable=False, default=DEFAULT_LICENSE)
    engine = Column(JSONDocument, nullable=True)  # {"atom": "*", "node": "*"}
    meta = Column(JSONDocument, nullable=True)  # package.json of this version

    __table_args__ = (
        UniqueConstraint("package", "semver", name="uq_versions_package_semver"),
        Index(
            "uq_versions_single_latest",
            "package",
            unique=True,
            postgresql_where=text("status = 'latest'"),
            sqlite_where=text("status = 'latest'"),
        ),
    )


class User(Base):
    """Users, created on first sign-in through the VCS provider."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    node_id = Column(String(256), nullable=False, unique=True, index=True)
    username = Column(String(256), nullable=False, index=True)
    avatar = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    data = Column(JSONDocument, nullable=True)


class Star(Base):
    """Star edge between a user and a package pointer."""
    __tablename__ = "stars"

    package = Column(
        Uuid(as_uuid=True),
        ForeignKey("packages.pointer", ondelete="CASCADE"),
        primary_key=True,
    )
    userid = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

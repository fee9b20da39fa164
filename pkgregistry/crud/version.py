"""
Version CRUD operations.
Keeps exactly one 'latest' version per package while versions come and go.
"""
from typing import Any, Dict, List
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from pkgregistry.core.models import DEFAULT_LICENSE, Version, utcnow
from pkgregistry.core.results import ConflictError, NotFoundError, registry_operation
from pkgregistry.core.schemas import VersionDescriptor
from pkgregistry.crud.names import require_package
from pkgregistry.utils.versioning import highest, is_greater, parse_version

logger = logging.getLogger(__name__)

LATEST = "latest"
PUBLISHED = "published"


def version_record(version: Version) -> Dict[str, Any]:
    """Plain dict view of a version row."""
    return {
        "id": version.id,
        "package": str(version.package),
        "status": version.status,
        "semver": version.semver,
        "license": version.license,
        "engine": version.engine,
        "meta": version.meta,
    }


def new_version_row(pointer: UUID, descriptor: VersionDescriptor, status: str) -> Version:
    return Version(
        package=pointer,
        status=status,
        semver=descriptor.semver,
        license=descriptor.license or DEFAULT_LICENSE,
        engine=descriptor.engine,
        meta=descriptor.version_meta(),
    )


def locked_versions(db: Session, pointer: UUID) -> List[Version]:
    """All versions of a pointer, oldest first, locked against concurrent writers."""
    return (
        db.query(Version)
        .filter(Version.package == pointer)
        .order_by(Version.id)
        .with_for_update()
        .all()
    )


def _promote_highest(versions: List[Version]) -> Version:
    semver = highest(v.semver for v in versions)
    promoted = next(v for v in versions if v.semver == semver)
    promoted.status = LATEST
    return promoted


# ========== CREATE Operations ==========

@registry_operation
def add_version(db: Session, name: str, descriptor: VersionDescriptor) -> str:
    """
    Publish a new version of an existing package.

    The new version becomes 'latest' only if it orders above the current
    latest; the old latest is demoted in the same transaction.
    """
    package = require_package(db, name, lock=True)
    versions = locked_versions(db, package.pointer)

    if any(v.semver == descriptor.semver for v in versions):
        raise ConflictError(f"Version {descriptor.semver} of {package.name} already exists")
    parse_version(descriptor.semver)

    current = next((v for v in versions if v.status == LATEST), None)
    if current is None or is_greater(descriptor.semver, current.semver):
        if current is not None:
            current.status = PUBLISHED
            # Demotion must reach the store before the new latest row does
            db.flush()
        status = LATEST
    else:
        status = PUBLISHED

    db.add(new_version_row(package.pointer, descriptor, status))
    package.updated = utcnow()
    db.flush()

    logger.info(f"Added version {package.name}@{descriptor.semver} (status={status})")
    return f"Successfully added new version: {package.name}@{descriptor.semver}"


# ========== READ Operations ==========

@registry_operation
def get_version(db: Session, name: str, semver: str) -> Dict[str, Any]:
    """Get a single version of a package by its semver."""
    package = require_package(db, name)
    version = db.query(Version).filter(
        Version.package == package.pointer,
        Version.semver == semver
    ).first()
    if version is None:
        raise NotFoundError(f"Version {semver} of {package.name} not found")
    return version_record(version)


def get_versions(db: Session, pointer: UUID) -> List[Dict[str, Any]]:
    """Versions of a pointer, oldest first."""
    versions = db.query(Version).filter(Version.package == pointer).order_by(Version.id).all()
    return [version_record(v) for v in versions]


@registry_operation
def list_versions(db: Session, name: str) -> List[Dict[str, Any]]:
    """All versions of a package, oldest first."""
    package = require_package(db, name)
    return get_versions(db, package.pointer)


# ========== DELETE Operations ==========

@registry_operation
def remove_version(db: Session, name: str, semver: str) -> str:
    """
    Remove one version of a package.

    The last remaining version can never be removed. If the removed version
    was 'latest', the highest remaining version is promoted.
    """
    package = require_package(db, name, lock=True)
    versions = locked_versions(db, package.pointer)

    target = next((v for v in versions if v.semver == semver), None)
    if target is None:
        raise NotFoundError(f"Version {semver} of {package.name} not found")
    if len(versions) == 1:
        raise ConflictError(
            f"It's not possible to leave the {package.name} without at least one published version"
        )

    remaining = [v for v in versions if v is not target]
    db.delete(target)
    # The row has to be gone before another one can take the latest status
    db.flush()

    latest = next((v for v in remaining if v.status == LATEST), None)
    if latest is None:
        latest = _promote_highest(remaining)
    package.updated = utcnow()
    db.flush()

    logger.info(f"Removed version {package.name}@{semver}, latest is now {latest.semver}")
    return f"Removed {semver} of {package.name} and {latest.semver} is the new latest version."

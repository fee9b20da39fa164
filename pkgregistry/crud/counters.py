"""
Counter operations.
Downloads and stargazers are adjusted with relative updates only, never read-modify-write.
"""
from typing import Any, Dict
from uuid import UUID
import logging

from sqlalchemy import case
from sqlalchemy.orm import Session

from pkgregistry.core.models import Package
from pkgregistry.core.results import ConflictError, NotFoundError, registry_operation
from pkgregistry.crud.names import require_pointer
from pkgregistry.crud.package import get_package_summary

logger = logging.getLogger(__name__)

COUNTERS = {
    "downloads": Package.downloads,
    "stargazers_count": Package.stargazers_count,
}


def adjust_counter(db: Session, pointer: UUID, counter: str, delta: int, clamp: bool = False) -> None:
    """
    Atomically add ``delta`` to a package counter.

    The update only applies while the result stays non-negative; a decrement
    that would go below zero raises ConflictError. With ``clamp`` the counter
    stops at zero instead, for paths where the change itself must not fail
    (removing a star edge).
    """
    column = COUNTERS[counter]
    query = db.query(Package).filter(Package.pointer == pointer)
    if clamp:
        value = case((column + delta < 0, 0), else_=column + delta)
    else:
        query = query.filter(column + delta >= 0)
        value = column + delta
    updated = query.update({column: value}, synchronize_session=False)

    if updated == 0:
        exists = db.query(Package.pointer).filter(Package.pointer == pointer).first()
        if exists is None:
            raise NotFoundError(f"Package {pointer} not found")
        raise ConflictError(f"Cannot decrement {counter} of package {pointer} below zero")

    logger.debug(f"Adjusted {counter} of {pointer} by {delta}")


def _adjust_by_name(db: Session, name: str, counter: str, delta: int) -> Dict[str, Any]:
    pointer = require_pointer(db, name)
    adjust_counter(db, pointer, counter, delta)
    summary = get_package_summary(db, pointer)
    logger.info(f"{counter} of {summary['name']} is now {summary[counter]}")
    return summary


@registry_operation
def increment_downloads(db: Session, name: str) -> Dict[str, Any]:
    return _adjust_by_name(db, name, "downloads", 1)


@registry_operation
def decrement_downloads(db: Session, name: str) -> Dict[str, Any]:
    return _adjust_by_name(db, name, "downloads", -1)


@registry_operation
def increment_stars(db: Session, name: str) -> Dict[str, Any]:
    """Bump the stargazer counter without recording a star edge."""
    return _adjust_by_name(db, name, "stargazers_count", 1)


@registry_operation
def decrement_stars(db: Session, name: str) -> Dict[str, Any]:
    """Lower the stargazer counter without touching star edges."""
    return _adjust_by_name(db, name, "stargazers_count", -1)

"""
Star CRUD operations.
A star edge and the package's stargazers_count always change in the same transaction.
"""
from typing import Any, Dict, List, Union
from uuid import UUID
import logging

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from pkgregistry.core.models import Star, User
from pkgregistry.core.results import NotFoundError, ServerError, registry_operation
from pkgregistry.crud.counters import adjust_counter
from pkgregistry.crud.names import require_package, require_pointer

logger = logging.getLogger(__name__)

_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def _user_id(user: Union[Dict[str, Any], int]) -> int:
    return user["id"] if isinstance(user, dict) else user


def _require_user(db: Session, user_id: int) -> None:
    if db.get(User, user_id) is None:
        raise NotFoundError(f"User {user_id} not found")


def insert_star_edge(db: Session, pointer: UUID, user_id: int) -> bool:
    """
    Insert a star edge unless it already exists.
    Returns True only when this call created the edge, so concurrent
    identical stars count once.
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise ServerError(f"Star edges are not supported on {dialect}")

    statement = insert(Star).values(package=pointer, userid=user_id).on_conflict_do_nothing(
        index_elements=[Star.package, Star.userid]
    )
    return db.execute(statement).rowcount == 1


# ========== CREATE Operations ==========

@registry_operation
def star_package(db: Session, user: Union[Dict[str, Any], int], name: str) -> str:
    """
    Record that a user starred a package.
    Starring twice succeeds without counting the star again.
    """
    user_id = _user_id(user)
    _require_user(db, user_id)
    package = require_package(db, name)

    if not insert_star_edge(db, package.pointer, user_id):
        logger.debug(f"User {user_id} already starred {package.name}")
        return f"Package Already Stared {package.pointer} with {user_id}"

    adjust_counter(db, package.pointer, "stargazers_count", 1)

    logger.info(f"User {user_id} starred {package.name}")
    return f"Successfully Stared {package.pointer} with {user_id}"


# ========== READ Operations ==========

@registry_operation
def get_starred_pointers(db: Session, user_id: int) -> List[str]:
    """Pointers of every package the user has starred."""
    rows = db.query(Star.package).filter(Star.userid == user_id).all()
    return [str(row.package) for row in rows]


@registry_operation
def get_starring_users(db: Session, name: str) -> List[int]:
    """Ids of every user who starred the package."""
    pointer = require_pointer(db, name)
    rows = db.query(Star.userid).filter(Star.package == pointer).order_by(Star.userid).all()
    return [row.userid for row in rows]


# ========== DELETE Operations ==========

@registry_operation
def unstar_package(db: Session, user: Union[Dict[str, Any], int], name: str) -> str:
    """
    Remove a user's star from a package.
    The edge always goes; the counter is lowered but never below zero.
    """
    user_id = _user_id(user)
    package = require_package(db, name)

    deleted = db.query(Star).filter(
        Star.package == package.pointer,
        Star.userid == user_id
    ).delete(synchronize_session=False)
    if deleted == 0:
        raise NotFoundError(f"User {user_id} has not starred {package.name}")
    adjust_counter(db, package.pointer, "stargazers_count", -1, clamp=True)

    logger.info(f"User {user_id} unstarred {package.name}")
    return f"Successfully Unstarred {package.pointer} with {user_id}"

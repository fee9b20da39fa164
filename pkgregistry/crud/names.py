"""
Name resolution.
Maps any name a package has ever had to its immutable pointer.
"""
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from pkgregistry.core.models import Name, Package
from pkgregistry.core.results import NotFoundError, registry_operation

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Package names are stored and compared in lowercase."""
    return (name or "").strip().lower()


def resolve_pointer(db: Session, name: str) -> Optional[UUID]:
    """Return the pointer for a current or historical name, or None."""
    row = db.query(Name.pointer).filter(Name.name == normalize_name(name)).first()
    if row is None:
        logger.debug(f"No pointer for name={name!r}")
        return None
    return row.pointer


def require_pointer(db: Session, name: str) -> UUID:
    """Resolve a name or raise NotFoundError."""
    pointer = resolve_pointer(db, name)
    if pointer is None:
        raise NotFoundError(f"Package {normalize_name(name)} not found")
    return pointer


def require_package(db: Session, name: str, lock: bool = False) -> Package:
    """Resolve a name to its package row, optionally locking it for update."""
    pointer = require_pointer(db, name)
    query = db.query(Package).filter(Package.pointer == pointer)
    if lock:
        query = query.with_for_update()
    package = query.first()
    if package is None:
        # Name row without its package; only possible mid-delete in another transaction
        raise NotFoundError(f"Package {normalize_name(name)} not found")
    return package


def name_taken(db: Session, name: str) -> bool:
    """True if the name is a current or historical name of any package."""
    return resolve_pointer(db, name) is not None


@registry_operation
def get_pointer(db: Session, name: str) -> str:
    """Resolve a name to its pointer."""
    return str(require_pointer(db, name))


@registry_operation
def list_names(db: Session, name: str) -> List[str]:
    """Full name history of the package addressed by ``name``."""
    pointer = require_pointer(db, name)
    rows = db.query(Name.name).filter(Name.pointer == pointer).order_by(Name.name).all()
    return [row.name for row in rows]

"""
Package CRUD operations.
Handles creation, renaming, deletion and reads of packages by any of their names.
"""
from math import ceil
from typing import Any, Dict, List, Optional, Union
from uuid import UUID
import logging
import uuid

from sqlalchemy import and_
from sqlalchemy.orm import Session

from pkgregistry.core.config import settings
from pkgregistry.core.models import Name, Package, Star, Version, utcnow
from pkgregistry.core.results import ConflictError, registry_operation
from pkgregistry.core.schemas import NewPackage
from pkgregistry.crud.names import name_taken, normalize_name, require_package
from pkgregistry.crud.version import LATEST, PUBLISHED, get_versions, new_version_row
from pkgregistry.utils.versioning import highest, parse_version

logger = logging.getLogger(__name__)

THEME_KINDS = ("syntax", "ui")

SORT_COLUMNS = {
    "downloads": Package.downloads,
    "created_at": Package.created,
    "updated_at": Package.updated,
    "stars": Package.stargazers_count,
}


def derive_package_type(metadata: Dict[str, Any]) -> str:
    """Packages declaring a syntax or ui theme in their metadata are themes."""
    theme = metadata.get("theme") if metadata else None
    if isinstance(theme, str) and theme.lower() in THEME_KINDS:
        return "theme"
    return "package"


def package_summary(package: Package) -> Dict[str, Any]:
    """
    Identity and counters of a package.
    Counters are strings so large values survive any JSON consumer.
    """
    return {
        "pointer": str(package.pointer),
        "name": package.name,
        "downloads": str(package.downloads),
        "stargazers_count": str(package.stargazers_count),
        "original_stargazers": str(package.original_stargazers),
    }


def package_record(package: Package, versions: List[Dict[str, Any]]) -> Dict[str, Any]:
    record = package_summary(package)
    record.update({
        "created": package.created,
        "updated": package.updated,
        "creation_method": package.creation_method,
        "package_type": package.package_type,
        "data": package.data,
        "versions": versions,
    })
    return record


# ========== CREATE Operations ==========

@registry_operation
def create_package(db: Session, new_package: NewPackage) -> str:
    """
    Create a package with its first name and all of its initial versions.
    Returns the new pointer.
    """
    name = normalize_name(new_package.name)
    if name_taken(db, name):
        raise ConflictError(f"A package named {name} already exists")

    semvers = [descriptor.semver for descriptor in new_package.versions]
    if len(set(semvers)) != len(semvers):
        raise ConflictError(f"Duplicate versions supplied for {name}")
    for semver in semvers:
        parse_version(semver)

    latest = new_package.latest or highest(semvers)
    if latest not in semvers:
        raise ConflictError(f"Latest version {latest} of {name} is not among its versions")

    now = utcnow()
    package = Package(
        pointer=uuid.uuid4(),
        name=name,
        created=now,
        updated=now,
        creation_method=new_package.creation_method,
        package_type=new_package.package_type or derive_package_type(new_package.metadata),
        data={
            "name": name,
            "readme": new_package.readme,
            "repository": new_package.repository,
            "metadata": new_package.metadata,
            "owner": new_package.owner,
        },
    )
    db.add(package)
    db.flush()

    db.add(Name(name=name, pointer=package.pointer))
    for descriptor in new_package.versions:
        status = LATEST if descriptor.semver == latest else PUBLISHED
        db.add(new_version_row(package.pointer, descriptor, status))
    db.flush()

    logger.info(f"Created package: {name} (pointer={package.pointer}, versions={len(semvers)}, latest={latest})")
    return str(package.pointer)


# ========== READ Operations ==========

@registry_operation
def get_package(db: Session, name: str) -> Dict[str, Any]:
    """Get a package with its versions by any of its names."""
    package = require_package(db, name)
    logger.debug(f"Read package {package.name} via name={name!r}")
    return package_record(package, get_versions(db, package.pointer))


def get_package_summary(db: Session, pointer: UUID) -> Dict[str, Any]:
    """Fresh summary of a package, read after counter updates."""
    package = db.query(Package).filter(Package.pointer == pointer).populate_existing().one()
    return package_summary(package)


def _listing_query(db: Session, package_type: Optional[str]):
    query = db.query(Package, Version.semver).outerjoin(
        Version,
        and_(Version.package == Package.pointer, Version.status == LATEST),
    )
    if package_type:
        query = query.filter(Package.package_type == package_type)
    return query


def _listing(package: Package, latest: Optional[str]) -> Dict[str, Any]:
    listing = package_summary(package)
    listing.update({
        "package_type": package.package_type,
        "latest": latest,
        "data": package.data,
    })
    return listing


def _paginate(query, page: int, sort: str, direction: str) -> Dict[str, Any]:
    column = SORT_COLUMNS.get(sort, Package.downloads)
    ordering = column.asc() if direction == "asc" else column.desc()
    limit = settings.paginated_amount
    page = max(page, 1)

    total = query.count()
    rows = query.order_by(ordering, Package.name.asc()).offset((page - 1) * limit).limit(limit).all()
    packages = [_listing(package, latest) for package, latest in rows]

    return {
        "packages": packages,
        "total": total,
        "pages": ceil(total / limit),
        "page": page,
    }


@registry_operation
def list_packages(
    db: Session,
    page: int = 1,
    sort: str = "downloads",
    direction: str = "desc",
    package_type: Optional[str] = None
) -> Dict[str, Any]:
    """
    Sorted, paginated listing of packages.
    Pass package_type="theme" for the themes listing.
    """
    result = _paginate(_listing_query(db, package_type), page, sort, direction)
    logger.debug(f"Listed {len(result['packages'])} of {result['total']} packages (page={page}, sort={sort})")
    return result


@registry_operation
def search_packages(
    db: Session,
    query: str,
    page: int = 1,
    sort: str = "downloads",
    direction: str = "desc",
    package_type: Optional[str] = None
) -> Dict[str, Any]:
    """Case-insensitive substring search over current package names."""
    # Escape % and _ so they match literally
    listing = _listing_query(db, package_type).filter(Package.name.icontains(query, autoescape=True))
    result = _paginate(listing, page, sort, direction)
    logger.debug(f"Search {query!r} found {result['total']} packages")
    return result


@registry_operation
def get_package_collection_by_pointers(db: Session, pointers: List[Union[str, UUID]]) -> List[Dict[str, Any]]:
    """
    Listings for a set of pointers, e.g. the packages a user has starred.
    Unknown pointers are skipped; results come back in the order requested.
    """
    wanted = []
    for pointer in pointers:
        try:
            wanted.append(pointer if isinstance(pointer, UUID) else UUID(str(pointer)))
        except ValueError:
            logger.debug(f"Skipping malformed pointer {pointer!r}")
    if not wanted:
        return []

    rows = _listing_query(db, None).filter(Package.pointer.in_(wanted)).all()
    by_pointer = {package.pointer: _listing(package, latest) for package, latest in rows}
    return [by_pointer[p] for p in wanted if p in by_pointer]


@registry_operation
def get_featured_packages(
    db: Session,
    names: List[str],
    package_type: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Listings for a curated list of names, current or historical.
    With package_type="theme" only themes are returned.
    """
    normalized = [normalize_name(name) for name in names]
    if not normalized:
        return []

    name_rows = db.query(Name.name, Name.pointer).filter(Name.name.in_(normalized)).all()
    pointer_for = {row.name: row.pointer for row in name_rows}
    rows = _listing_query(db, package_type).filter(Package.pointer.in_(set(pointer_for.values()))).all()
    by_pointer = {package.pointer: _listing(package, latest) for package, latest in rows}

    featured, seen = [], set()
    for name in normalized:
        pointer = pointer_for.get(name)
        if pointer in by_pointer and pointer not in seen:
            seen.add(pointer)
            featured.append(by_pointer[pointer])
    logger.debug(f"Featured lookup matched {len(featured)} of {len(normalized)} names")
    return featured


@registry_operation
def get_total_package_estimate(db: Session) -> int:
    """Number of packages in the registry."""
    return db.query(Package).count()


# ========== UPDATE Operations ==========

@registry_operation
def rename_package(db: Session, new_name: str, current_name: str) -> str:
    """
    Give a package a new name.
    The old name keeps resolving to the same pointer.
    """
    package = require_package(db, current_name, lock=True)
    new_name = normalize_name(new_name)
    if name_taken(db, new_name):
        raise ConflictError(f"A package named {new_name} already exists")

    old_name = package.name
    db.add(Name(name=new_name, pointer=package.pointer))
    db.flush()
    package.name = new_name
    # Reassign so the JSON column is seen as changed
    package.data = {**(package.data or {}), "name": new_name}
    package.updated = utcnow()
    db.flush()

    logger.info(f"Renamed package {old_name} -> {new_name} (pointer={package.pointer})")
    return f"Successfully inserted {new_name}."


# ========== DELETE Operations ==========

@registry_operation
def delete_package(db: Session, name: str) -> str:
    """Delete a package together with its names, versions and stars."""
    package = require_package(db, name, lock=True)
    pointer = package.pointer
    current_name = package.name

    db.query(Star).filter(Star.package == pointer).delete(synchronize_session=False)
    db.query(Version).filter(Version.package == pointer).delete(synchronize_session=False)
    db.query(Name).filter(Name.pointer == pointer).delete(synchronize_session=False)
    db.delete(package)
    db.flush()

    logger.info(f"Deleted package {current_name} (pointer={pointer})")
    return f"Successfully Deleted Package: {current_name}"

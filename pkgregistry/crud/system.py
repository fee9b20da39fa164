"""
System-wide operations.
Consistency audits and resets that touch every package at once.
"""
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from pkgregistry.core.models import Name, Package, Star, User, Version
from pkgregistry.core.results import registry_operation
from pkgregistry.crud.names import require_pointer

logger = logging.getLogger(__name__)


@registry_operation
def audit_stargazers(db: Session, name: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Recompute stargazers_count from star edges.

    Audits a single package when ``name`` is given, otherwise every package.
    Returns the packages whose cached counter was corrected.
    """
    edge_counts = (
        db.query(Star.package, func.count(Star.userid).label("actual"))
        .group_by(Star.package)
        .subquery()
    )
    query = db.query(Package, func.coalesce(edge_counts.c.actual, 0)).outerjoin(
        edge_counts, edge_counts.c.package == Package.pointer
    )
    if name is not None:
        query = query.filter(Package.pointer == require_pointer(db, name))

    corrected = []
    for package, actual in query.with_for_update(of=Package).all():
        if package.stargazers_count != actual:
            corrected.append({
                "name": package.name,
                "cached": str(package.stargazers_count),
                "actual": str(actual),
            })
            package.stargazers_count = actual

    if corrected:
        logger.warning(f"Corrected stargazers_count on {len(corrected)} packages")
    else:
        logger.info("stargazers_count matches star edges on every audited package")
    return corrected


def reset_system(db: Session) -> None:
    """
    Delete every row in the registry.
    Intended for development and test environments only.
    """
    logger.warning("Resetting system...")

    try:
        # Children first so foreign keys hold throughout
        for model in (Star, Version, Name, Package, User):
            db.query(model).delete(synchronize_session=False)
        db.commit()
    except Exception as e:
        logger.error(f"Reset failed: {e}")
        db.rollback()
        raise

    count = db.query(Package).count()
    if count != 0:
        logger.error(f"Reset verification failed: {count} packages still exist!")
        raise RuntimeError(f"Reset failed: {count} packages still exist after deletion")

    logger.info("System reset completed and verified (0 packages remain)")

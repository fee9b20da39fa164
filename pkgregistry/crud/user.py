"""
User CRUD operations.
Handles all database operations related to the User model.
"""
from typing import Any, Dict, List
import logging

from sqlalchemy.orm import Session

from pkgregistry.core.models import User
from pkgregistry.core.results import ConflictError, NotFoundError, registry_operation
from pkgregistry.core.schemas import UserProfile

logger = logging.getLogger(__name__)


def user_record(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "node_id": user.node_id,
        "avatar": user.avatar,
        "created_at": user.created_at,
        "data": user.data,
    }


# ========== CREATE Operations ==========

@registry_operation
def create_user(db: Session, profile: UserProfile) -> Dict[str, Any]:
    """Create a user on first sign-in."""
    existing = db.query(User).filter(User.node_id == profile.node_id).first()
    if existing:
        raise ConflictError(f"A user with node id {profile.node_id} already exists")

    user = User(
        username=profile.username,
        node_id=profile.node_id,
        avatar=profile.avatar,
        data=profile.data,
    )
    db.add(user)
    db.flush()

    logger.info(f"Created user: {user.username} (id={user.id})")
    return user_record(user)


# ========== READ Operations ==========

@registry_operation
def get_user_by_node_id(db: Session, node_id: str) -> Dict[str, Any]:
    user = db.query(User).filter(User.node_id == node_id).first()
    if not user:
        raise NotFoundError(f"User with node id {node_id} not found")
    return user_record(user)


@registry_operation
def get_user_by_name(db: Session, username: str) -> Dict[str, Any]:
    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise NotFoundError(f"User {username} not found")
    return user_record(user)


@registry_operation
def get_user_by_id(db: Session, user_id: int) -> Dict[str, Any]:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user_record(user)


@registry_operation
def get_user_collection_by_id(db: Session, user_ids: List[int]) -> List[Dict[str, Any]]:
    """
    Public profiles for a list of user ids.
    Unknown ids are skipped; no particular order is guaranteed.
    """
    if not user_ids:
        return []
    users = db.query(User).filter(User.id.in_(user_ids)).all()
    logger.debug(f"Found {len(users)} of {len(user_ids)} requested users")
    return [{"login": user.username, "avatar": user.avatar} for user in users]

"""
CRUD operations for the package registry.
Organized by entity/domain; every function is re-exported at the package level.
"""

# Name resolution
from .names import (
    normalize_name,
    resolve_pointer,
    get_pointer,
    list_names
)

# Package operations
from .package import (
    create_package,
    get_package,
    list_packages,
    search_packages,
    get_package_collection_by_pointers,
    get_featured_packages,
    get_total_package_estimate,
    rename_package,
    delete_package
)

# Version operations
from .version import (
    add_version,
    get_version,
    list_versions,
    remove_version
)

# Counter operations
from .counters import (
    adjust_counter,
    increment_downloads,
    decrement_downloads,
    increment_stars,
    decrement_stars
)

# User operations
from .user import (
    create_user,
    get_user_by_node_id,
    get_user_by_name,
    get_user_by_id,
    get_user_collection_by_id
)

# Star operations
from .star import (
    star_package,
    unstar_package,
    get_starred_pointers,
    get_starring_users
)

# System operations
from .system import (
    audit_stargazers,
    reset_system
)

__all__ = [
    # Names
    "normalize_name",
    "resolve_pointer",
    "get_pointer",
    "list_names",
    # Package
    "create_package",
    "get_package",
    "list_packages",
    "search_packages",
    "get_package_collection_by_pointers",
    "get_featured_packages",
    "get_total_package_estimate",
    "rename_package",
    "delete_package",
    # Version
    "add_version",
    "get_version",
    "list_versions",
    "remove_version",
    # Counters
    "adjust_counter",
    "increment_downloads",
    "decrement_downloads",
    "increment_stars",
    "decrement_stars",
    # User
    "create_user",
    "get_user_by_node_id",
    "get_user_by_name",
    "get_user_by_id",
    "get_user_collection_by_id",
    # Star
    "star_package",
    "unstar_package",
    "get_starred_pointers",
    "get_starring_users",
    # System
    "audit_stargazers",
    "reset_system",
]

from pkgregistry.core.database import Database, create_database
from pkgregistry.core.models import Base, Package, Name, Version, User, Star
from pkgregistry.core.results import (
    OperationResult,
    RegistryError,
    NotFoundError,
    ConflictError,
    ServerError,
    registry_operation
)
from pkgregistry.core.schemas import NewPackage, VersionDescriptor, UserProfile

__all__ = [
    'Database',
    'create_database',
    'Base',
    'Package',
    'Name',
    'Version',
    'User',
    'Star',
    'OperationResult',
    'RegistryError',
    'NotFoundError',
    'ConflictError',
    'ServerError',
    'registry_operation',
    'NewPackage',
    'VersionDescriptor',
    'UserProfile'
]

"""
Operation results and the registry error taxonomy.

Every public crud operation returns an OperationResult; failures carry a short,
machine-readable category plus a human-readable detail in ``content``.
Internally the operations raise RegistryError subclasses, which
``registry_operation`` turns into failed results after rolling back.
"""
import functools
import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

NOT_FOUND = "Not Found"
CONFLICT = "Conflict"
SERVER_ERROR = "Server Error"
BAD_AUTH = "Bad Auth"
NO_ACCESS = "No Access"


class OperationResult(BaseModel):
    """Outcome of a registry operation."""
    ok: bool
    short: Optional[str] = None
    content: Any = None

    def __bool__(self) -> bool:
        return self.ok


def success(content: Any = None) -> OperationResult:
    return OperationResult(ok=True, content=content)


def failure(short: str, content: Any = None) -> OperationResult:
    return OperationResult(ok=False, short=short, content=content)


class RegistryError(Exception):
    """Base class for errors raised inside registry operations."""
    short = SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_result(self) -> OperationResult:
        return failure(self.short, self.detail)


class NotFoundError(RegistryError):
    """A name, pointer, version or user does not resolve."""
    short = NOT_FOUND


class ConflictError(RegistryError):
    """An invariant would be violated (duplicate name, last version, ...)."""
    short = CONFLICT


class ServerError(RegistryError):
    """Storage failure or data of an unexpected shape."""
    short = SERVER_ERROR


def registry_operation(func: Callable[..., Any]) -> Callable[..., OperationResult]:
    """
    Run a crud operation as a single transaction on the given session.

    The wrapped function takes the session as its first argument and returns
    the success payload. On success the session is committed; on any error it
    is rolled back and the error is reported as a failed OperationResult.
    """

    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs) -> OperationResult:
        try:
            content = func(db, *args, **kwargs)
            db.commit()
        except RegistryError as e:
            db.rollback()
            logger.warning(f"{func.__name__} failed: {e.short}: {e.detail}")
            return e.to_result()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"{func.__name__} hit a constraint violation: {e.orig}")
            return failure(CONFLICT, "The change conflicts with existing data")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"{func.__name__} storage failure: {e}")
            return failure(SERVER_ERROR, "A storage error occurred")
        return success(content)

    return wrapper

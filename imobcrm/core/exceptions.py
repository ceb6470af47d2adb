"""imobcrm exception taxonomy.

Every custom exception inherits from :class:`ImobCrmError`.  Exceptions are
organised by architectural layer so callers can catch at the right granularity:

    Layer hierarchy
    ---------------
    ImobCrmError
    ├── ConfigError
    ├── DatastoreError
    │   ├── UnknownCollectionError
    │   └── RecordNotFoundError
    ├── AuthError
    │   ├── NotAuthenticatedError
    │   ├── InvalidCredentialsError
    │   └── UserAlreadyExistsError
    ├── PublishingError
    │   ├── PropertyValidationError
    │   └── AdapterError
    └── CrmError

Per-platform publishing outcomes are *data* (:class:`~imobcrm.core.models.
PublishingResult`), never exceptions.  :class:`AdapterError` is raised
for a platform with no registered adapter (and may be raised by adapters
themselves); the publishing service converts it into a failed result like
any other exception.

Usage:

    from imobcrm.core.exceptions import PropertyValidationError

    raise PropertyValidationError(outcome.errors)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

__all__ = [
    "ImobCrmError",
    # Config
    "ConfigError",
    # Datastore
    "DatastoreError",
    "UnknownCollectionError",
    "RecordNotFoundError",
    # Auth
    "AuthError",
    "NotAuthenticatedError",
    "InvalidCredentialsError",
    "UserAlreadyExistsError",
    # Publishing
    "PublishingError",
    "PropertyValidationError",
    "AdapterError",
    # CRM
    "CrmError",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class ImobCrmError(Exception):
    """Root exception for all imobcrm errors.

    Catch this to handle any application-level error uniformly.  Prefer
    catching layer-specific subclasses wherever possible.
    """


# ---------------------------------------------------------------------------
# Config layer
# ---------------------------------------------------------------------------


class ConfigError(ImobCrmError):
    """Raised when the application configuration is invalid or incomplete.

    Examples:
        - ``DATASTORE_BACKEND=supabase`` without ``SUPABASE_URL``.
        - A simulation success rate outside ``[0, 1]``.
    """


# ---------------------------------------------------------------------------
# Datastore layer
# ---------------------------------------------------------------------------


class DatastoreError(ImobCrmError):
    """Raised when a datastore gateway operation fails.

    Args:
        message: Human-readable error description.
    """


class UnknownCollectionError(DatastoreError):
    """Raised when a gateway is asked for a collection it does not host.

    Args:
        collection: The collection (table) name that was requested.
    """

    def __init__(self, collection: str) -> None:
        self.collection = collection
        super().__init__(f"Unknown collection: {collection!r}")


class RecordNotFoundError(DatastoreError):
    """Raised when a single-record lookup or scoped write matches nothing.

    Args:
        collection: Collection that was queried.
        record_id: Identifier that could not be found.
    """

    def __init__(self, collection: str, record_id: str) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No {collection} record with id {record_id!r}")


# ---------------------------------------------------------------------------
# Auth layer
# ---------------------------------------------------------------------------


class AuthError(ImobCrmError):
    """Base class for authentication / authorisation failures."""


class NotAuthenticatedError(AuthError):
    """Raised when an operation requires a signed-in user and none is present."""

    def __init__(self, message: str = "Usuário não autenticado") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Raised when sign-in is attempted with a wrong e-mail/password pair."""

    def __init__(self, message: str = "E-mail ou senha inválidos") -> None:
        super().__init__(message)


class UserAlreadyExistsError(AuthError):
    """Raised when sign-up is attempted with an e-mail already registered.

    Args:
        email: The e-mail address that is already taken.
    """

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Usuário já cadastrado: {email}")


# ---------------------------------------------------------------------------
# Publishing layer
# ---------------------------------------------------------------------------


class PublishingError(ImobCrmError):
    """Base class for errors raised by the publishing workflow."""


class PropertyValidationError(PublishingError):
    """Raised at the call site when a property fails the publication rules.

    Carries the ordered list of corrective messages produced by
    :func:`~imobcrm.publishing.validation.validate_property_for_publishing`
    so the caller can show them all at once.

    Args:
        errors: Ordered, human-readable rule violations (never empty).
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: list[str] = list(errors)
        joined = "\n".join(self.errors)
        super().__init__(f"Erro na validação:\n{joined}")


class AdapterError(PublishingError):
    """Raised for unexpected faults while talking to a listing platform.

    Args:
        platform: Platform identifier (e.g. ``"olx"``).
        message: Human-readable error description.
    """

    def __init__(self, platform: str, message: str) -> None:
        self.platform = platform
        super().__init__(message)


# ---------------------------------------------------------------------------
# CRM layer
# ---------------------------------------------------------------------------


class CrmError(ImobCrmError):
    """Raised when a lead or property operation receives unusable input.

    Examples:
        - Creating a lead without name, e-mail or phone.
        - Updating a property status to a value outside the known set.
    """

"""Core domain models, settings, logging configuration, and shared utilities."""

from imobcrm.core.exceptions import (
    AdapterError,
    AuthError,
    ConfigError,
    CrmError,
    DatastoreError,
    ImobCrmError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    PropertyValidationError,
    PublishingError,
    RecordNotFoundError,
    UnknownCollectionError,
    UserAlreadyExistsError,
)
from imobcrm.core.logging_config import JsonFormatter, configure_logging
from imobcrm.core.models import (
    ContactInfo,
    Lead,
    Platform,
    Profile,
    Property,
    PublishingOptions,
    PublishingResult,
)
from imobcrm.core.settings import Settings

__all__ = [
    # Logging
    "configure_logging",
    "JsonFormatter",
    # Domain models
    "ContactInfo",
    "Lead",
    "Platform",
    "Profile",
    "Property",
    "PublishingOptions",
    "PublishingResult",
    # Settings
    "Settings",
    # Exceptions
    "ImobCrmError",
    "ConfigError",
    "DatastoreError",
    "UnknownCollectionError",
    "RecordNotFoundError",
    "AuthError",
    "NotAuthenticatedError",
    "InvalidCredentialsError",
    "UserAlreadyExistsError",
    "PublishingError",
    "PropertyValidationError",
    "AdapterError",
    "CrmError",
]

"""Core infrastructure: bootstrap, error handling, logging, module registry and signals."""

from .error_handlers import (
    AuthorizationError,
    ConfigurationError,
    EmptyPoolError,
    HebrewDuoError,
    NotFoundError,
    StaleSessionError,
    StoreError,
    UnknownModeError,
    ValidationError,
)

__all__ = [
    'AuthorizationError',
    'ConfigurationError',
    'EmptyPoolError',
    'HebrewDuoError',
    'NotFoundError',
    'StaleSessionError',
    'StoreError',
    'UnknownModeError',
    'ValidationError',
]

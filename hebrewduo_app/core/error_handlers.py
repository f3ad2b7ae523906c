"""
Error Handlers for Hebrew Duo

Provides:
- Custom exception classes
- Consistent error response format
- Flask error handlers
"""

from typing import Any, Dict, Optional

from flask import current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db


class HebrewDuoError(Exception):
    """Base exception class for Hebrew Duo."""

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class NotFoundError(HebrewDuoError):
    """Resource not found."""

    def __init__(self, message: str = 'Resource not found', resource: str = None):
        super().__init__(
            message=message,
            code='NOT_FOUND',
            status_code=404,
            details={'resource': resource} if resource else None
        )


class ValidationError(HebrewDuoError):
    """Input validation failed."""

    def __init__(self, message: str = 'Validation failed', errors: Dict = None):
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            status_code=400,
            details={'errors': errors} if errors else None
        )


class AuthorizationError(HebrewDuoError):
    """Acting on content the user does not own, without the admin role."""

    def __init__(self, message: str = 'Access denied'):
        super().__init__(
            message=message,
            code='FORBIDDEN',
            status_code=403
        )


class ConfigurationError(HebrewDuoError):
    """A training session cannot be set up with the submitted configuration."""

    def __init__(self, message: str = 'Invalid training configuration', code: str = 'CONFIGURATION_ERROR'):
        super().__init__(message=message, code=code, status_code=400)


class EmptyPoolError(ConfigurationError):
    """The configuration is valid but no item is eligible for drilling."""

    def __init__(self, message: str = 'Aucun élément ne correspond à ces critères.'):
        super().__init__(message=message, code='NO_ELIGIBLE_ITEMS')


class UnknownModeError(ConfigurationError):
    """A drill or review mode name is not recognised."""

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(message=f"Mode inconnu : {mode}", code='UNKNOWN_MODE')


class StaleSessionError(HebrewDuoError):
    """No active training session, or the answer refers to another item."""

    def __init__(self, message: str = 'No active training session'):
        super().__init__(message=message, code='STALE_SESSION', status_code=409)


class StoreError(HebrewDuoError):
    """The persisted store failed; the caller may retry the same operation."""

    def __init__(self, message: str = 'Une erreur est survenue, veuillez réessayer.'):
        super().__init__(message=message, code='STORE_ERROR', status_code=503)


def error_response(
    message: str,
    code: str = 'ERROR',
    status_code: int = 400,
    details: Dict = None
) -> tuple:
    """Create a standardized error response."""
    response = {
        'success': False,
        'message': message,
        'code': code
    }
    if details:
        response['details'] = details

    return jsonify(response), status_code


def success_response(data: Any = None, message: str = None) -> dict:
    """Create a standardized success response."""
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    return response


def register_error_handlers(app):
    """Register error handlers with Flask app."""

    @app.errorhandler(HebrewDuoError)
    def handle_hebrewduo_error(error):
        if error.status_code >= 500:
            current_app.logger.error(f"{error.code}: {error.message}")
        else:
            current_app.logger.warning(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_store_failure(error):
        db.session.rollback()
        current_app.logger.exception("Unhandled store failure")
        store_error = StoreError()
        return jsonify(store_error.to_dict()), store_error.status_code

    @app.errorhandler(401)
    def handle_unauthorized(error):
        return error_response('Authentication required', 'UNAUTHORIZED', 401)

    @app.errorhandler(404)
    def handle_not_found(error):
        return error_response(f'Endpoint not found: {request.path}', 'NOT_FOUND', 404)

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Internal server error')
        return error_response('Internal server error', 'SERVER_ERROR', 500)

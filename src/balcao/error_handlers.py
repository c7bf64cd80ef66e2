"""
Centralized error handlers for Flask applications.
"""

from http import HTTPStatus

from flask import Flask, jsonify
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from balcao.errors import DashboardError
from balcao.logging_config import get_logger
from balcao.serializers import error_response
from balcao.validation import ValidationError

logger = get_logger(__name__)


def register_error_handlers(app: Flask) -> None:
    """
    Register centralized error handlers for the Flask app.

    Every error is answered with the JSON error envelope so the dashboard can
    show it as a notification; the app itself keeps running.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        """Handle custom validation errors."""
        logger.warning(f"Validation error: {e}")
        return jsonify(error_response(str(e))), HTTPStatus.BAD_REQUEST

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_validation_error(e: PydanticValidationError):
        """Handle Pydantic validation errors."""
        logger.warning(f"Pydantic validation error: {e}")
        return jsonify(
            error_response("Dados inválidos", {"details": e.errors(include_url=False)})
        ), HTTPStatus.BAD_REQUEST

    @app.errorhandler(DashboardError)
    def handle_dashboard_error(e: DashboardError):
        """Retrieval, write, not-found and conflict errors raised by services."""
        if e.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error(f"{type(e).__name__}: {e.message}")
        else:
            logger.warning(f"{type(e).__name__}: {e.message}")
        return jsonify(error_response(e.message, e.details or None)), e.status

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e: SQLAlchemyError):
        """Handle database errors."""
        logger.error(f"Database error: {e}", exc_info=True)
        return jsonify(error_response("Erro de banco de dados")), HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Handle HTTP exceptions from Werkzeug."""
        logger.warning(f"HTTP exception {e.code}: {e.description}")
        return jsonify(error_response(e.description or str(e))), e.code

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify(error_response("Recurso não encontrado")), HTTPStatus.NOT_FOUND

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return jsonify(error_response("Método não permitido")), HTTPStatus.METHOD_NOT_ALLOWED

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        """Handle any unhandled exceptions."""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify(
            error_response("Erro interno do servidor")
        ), HTTPStatus.INTERNAL_SERVER_ERROR

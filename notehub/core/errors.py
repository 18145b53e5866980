"""Ошибки сервиса: токены, разбор пути, проверка прав и обработчики.

У каждой ошибки есть HTTP статус, API слой отдает их одним обработчиком
в виде ``{"success": false, "error": ...}``.
"""
from fastapi import status


class NotebookServiceError(Exception):
    """Базовая ошибка, которая завершает запрос JSON ответом с ошибкой"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthMissing(NotebookServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class AuthInvalid(NotebookServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class AuthExpired(NotebookServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token expired"


class MalformedReference(NotebookServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid id"


class ValidationFailed(NotebookServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AccessDenied(NotebookServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class ResourceNotFound(NotebookServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Conflict(NotebookServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"

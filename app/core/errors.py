"""
Taxonomía de errores de la consola de administración.

Todas las operaciones de servicio lanzan subclases de ``ConsoleError``; los
endpoints no necesitan capturarlas porque ``register_exception_handlers`` las
convierte en respuestas ``{"detail": ...}`` con el código HTTP adecuado.
``MissingIndexError`` es la única que nunca llega al cliente: la capa de
repositorios la recupera con la estrategia de escaneo + ordenación.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)

logger = logging.getLogger(__name__)


class ConsoleError(Exception):
    """Error base de la consola con mensaje para el operador."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Error inesperado. Inténtalo de nuevo."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class PermissionDeniedError(ConsoleError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "No tienes permisos para realizar esta acción"


class NotFoundError(ConsoleError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Registro no encontrado"


class InvalidTransitionError(ConsoleError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "La transición de estado no está permitida"


class ConflictError(ConsoleError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "El registro entra en conflicto con datos existentes"


class BackendUnavailableError(ConsoleError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "El servicio de datos no está disponible. Inténtalo de nuevo."


class MissingIndexError(ConsoleError):
    """La consulta filtrada y ordenada requiere un índice compuesto no declarado."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "La consulta ordenada requiere un índice compuesto"

    def __init__(self, collection: str, filters=(), sort_field: Optional[str] = None):
        self.collection = collection
        self.filters = tuple(filters)
        self.sort_field = sort_field
        super().__init__(
            f"Índice compuesto no declarado para {collection}: "
            f"{','.join(self.filters)} ordenado por {sort_field}"
        )


class IdentityServiceError(ConsoleError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Error del servicio de autenticación"


class EmailAlreadyInUseError(IdentityServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "El email ya está registrado"


class WeakPasswordError(IdentityServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "La contraseña debe tener al menos 6 caracteres"


class InvalidCredentialsError(IdentityServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Email o contraseña incorrectos"


def classify_backend_error(exc: Exception) -> ConsoleError:
    """
    Traduce un error de la capa de datos a la taxonomía de la consola.

    Args:
        exc: Excepción original (normalmente de SQLAlchemy)

    Returns:
        ConsoleError: Error clasificado, listo para propagar
    """
    if isinstance(exc, ConsoleError):
        return exc
    if isinstance(exc, IntegrityError):
        return ConflictError()
    if isinstance(exc, (OperationalError, InterfaceError)):
        message = str(getattr(exc, "orig", exc)).lower()
        if "no such index" in message or "requires an index" in message:
            return MissingIndexError("desconocida")
        return BackendUnavailableError()
    if isinstance(exc, (DBAPIError, SQLAlchemyError)):
        return BackendUnavailableError()
    return ConsoleError()


async def console_error_handler(request: Request, exc: ConsoleError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Error de base de datos no clasificado en {request.url.path}: {exc}", exc_info=True)
    return await console_error_handler(request, classify_backend_error(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ConsoleError, console_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)

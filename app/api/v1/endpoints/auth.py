from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, get_admin_session
from app.db.session import get_db
from app.middleware.rate_limit import LOGIN_RATE_LIMIT, limiter
from app.schemas.auth import LoginRequest, LoginResponse, SessionInfo
from app.services.console_auth import console_auth_service, session_info
from app.services.identity import IdentityServiceClient, get_identity_client

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    identity: IdentityServiceClient = Depends(get_identity_client),
) -> LoginResponse:
    """
    Inicia sesión con email y contraseña.

    Solo los roles superAdmin y gymAdmin pueden entrar; la respuesta indica
    a qué consola debe dirigirse el operador.

    Args:
        request: Petición HTTP (la usa el rate limiter)
        credentials: Email y contraseña

    Returns:
        LoginResponse: Token y sesión del operador

    Raises:
        InvalidCredentialsError: 401 si las credenciales no son válidas
        PermissionDeniedError: 403 si el usuario no es administrador
    """
    return await console_auth_service.login(db, identity, credentials.email, credentials.password)


@router.get("/me", response_model=SessionInfo)
async def read_session(session: AdminSession = Depends(get_admin_session)) -> SessionInfo:
    """Sesión actual del operador."""
    return session_info(session)

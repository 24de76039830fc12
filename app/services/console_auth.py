import logging

from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, build_admin_session
from app.schemas.auth import LoginResponse, SessionInfo
from app.services.identity import IdentityServiceClient

logger = logging.getLogger(__name__)


def session_info(session: AdminSession) -> SessionInfo:
    return SessionInfo(
        uid=session.uid,
        email=session.email,
        profile=session.profile,
        gym=session.gym,
        console=session.console,
    )


class ConsoleAuthService:
    async def login(
        self,
        db: Session,
        identity: IdentityServiceClient,
        email: str,
        password: str,
    ) -> LoginResponse:
        """
        Inicia sesión en el servicio de identidad y resuelve la consola del operador.

        Args:
            db: Sesión de base de datos
            identity: Cliente del servicio de identidad
            email: Email del administrador
            password: Contraseña

        Returns:
            LoginResponse: Token del servicio de identidad y sesión resuelta

        Raises:
            InvalidCredentialsError: Si las credenciales no son válidas
            PermissionDeniedError: Si el usuario no tiene perfil o es un miembro
        """
        account = await identity.sign_in(email, password)
        session = build_admin_session(db, account.uid, account.email or email)
        logger.info(f"Login de {session.uid} ({session.role.value}) -> consola {session.console}")
        return LoginResponse(
            access_token=account.id_token,
            refresh_token=account.refresh_token,
            expires_in=account.expires_in,
            session=session_info(session),
        )


console_auth_service = ConsoleAuthService()

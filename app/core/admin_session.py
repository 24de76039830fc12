"""
Sesión explícita del operador de la consola.

Se construye una vez por petición a partir del token verificado y se pasa
como parámetro a cada servicio; no hay contexto global del usuario actual.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.auth import TokenVerifier, unauthorized_error, bearer_scheme, get_token_verifier
from app.core.errors import PermissionDeniedError
from app.db.session import get_db
from app.models.user import UserRole
from app.repositories.gym import gym_repository
from app.repositories.user import user_repository
from app.schemas.gym import Gym as GymSchema
from app.schemas.user import UserProfile as UserProfileSchema

logger = logging.getLogger(__name__)

CONSOLE_BY_ROLE = {
    UserRole.SUPER_ADMIN: "super-admin",
    UserRole.GYM_ADMIN: "dashboard",
}


@dataclass(frozen=True)
class AdminSession:
    uid: str
    email: Optional[str]
    profile: UserProfileSchema
    gym: Optional[GymSchema] = None

    @property
    def role(self) -> UserRole:
        return self.profile.role

    @property
    def gym_id(self) -> Optional[str]:
        return self.profile.gym_id

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def console(self) -> str:
        return CONSOLE_BY_ROLE[self.role]

    def require_gym_id(self) -> str:
        """ID del gimnasio que administra el operador (403 si no tiene)."""
        if not self.gym_id:
            raise PermissionDeniedError("Gimnasio no encontrado para este administrador")
        return self.gym_id

    def ensure_gym_access(self, gym_id: Optional[str]) -> None:
        """El super admin accede a todo; un admin solo a su propio gimnasio."""
        if self.is_super_admin:
            return
        if gym_id is None or gym_id != self.gym_id:
            logger.warning(f"Acceso denegado: admin {self.uid} sobre gimnasio {gym_id}")
            raise PermissionDeniedError()


def build_admin_session(db: Session, uid: str, email: Optional[str] = None) -> AdminSession:
    """
    Carga el perfil y el gimnasio del operador y valida que sea administrador.

    Raises:
        PermissionDeniedError: Si no hay perfil o el rol es ``member``
    """
    profile = user_repository.get(db, uid)
    if profile is None:
        raise PermissionDeniedError("Perfil de usuario no encontrado")
    if profile.role not in CONSOLE_BY_ROLE:
        logger.info(f"Usuario {uid} con rol {profile.role} intentó acceder a la consola")
        raise PermissionDeniedError("Solo los administradores pueden acceder a la consola")

    gym = None
    if profile.gym_id:
        gym_obj = gym_repository.get(db, profile.gym_id)
        gym = GymSchema.model_validate(gym_obj) if gym_obj else None

    return AdminSession(
        uid=profile.uid,
        email=email or profile.email,
        profile=UserProfileSchema.model_validate(profile),
        gym=gym,
    )


async def get_admin_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AdminSession:
    if credentials is None or not credentials.credentials:
        raise unauthorized_error("No autenticado")
    claims = await verifier.verify_token(credentials.credentials)
    uid = claims.get("user_id") or claims.get("sub")
    if not uid:
        raise unauthorized_error("Token sin identificador de usuario")
    return build_admin_session(db, uid, claims.get("email"))


async def require_super_admin(session: AdminSession = Depends(get_admin_session)) -> AdminSession:
    if not session.is_super_admin:
        raise PermissionDeniedError("Se requiere rol de super admin")
    return session


async def require_gym_admin(session: AdminSession = Depends(get_admin_session)) -> AdminSession:
    if session.role != UserRole.GYM_ADMIN:
        raise PermissionDeniedError("Se requiere rol de administrador de gimnasio")
    session.require_gym_id()
    return session

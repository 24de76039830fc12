"""
Gestión de gimnasios: consola del super admin y ajustes del propio gimnasio.

El alta de un gimnasio crea también la cuenta de su administrador en el
servicio de identidad. Son dos sistemas sin transacción común, así que el
flujo es una saga:

1. Crear la cuenta en el servicio de identidad
2. Escribir gimnasio + perfil gymAdmin en una sola transacción
3. Si el paso 2 falla, borrar la cuenta creada en el paso 1
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.core.date_utils import utc_now
from app.core.errors import ConsoleError, NotFoundError
from app.db.session import transaction
from app.models.gym import Gym
from app.models.user import EnrollmentStatus, UserRole
from app.repositories.gym import gym_repository
from app.repositories.user import user_repository
from app.schemas.auth import PasswordResetResult
from app.schemas.gym import (
    Gym as GymSchema,
    GymListResponse,
    GymProvisionRequest,
    GymProvisionResult,
    GymSettingsUpdate,
    PlatformStats,
)
from app.services.identity import IdentityAccount, IdentityServiceClient

logger = logging.getLogger(__name__)


class GymService:

    # --- Consola de super admin ---

    def list_gyms(self, db: Session) -> GymListResponse:
        """
        Todos los gimnasios, los más recientes primero, con estadísticas de plataforma.
        """
        gyms = gym_repository.list_newest_first(db)
        active = sum(1 for g in gyms if g.is_active)
        stats = PlatformStats(
            total_gyms=len(gyms),
            active_gyms=active,
            inactive_gyms=len(gyms) - active,
            total_monthly_fees=float(sum(g.monthly_fee or 0.0 for g in gyms)),
        )
        return GymListResponse(gyms=[GymSchema.model_validate(g) for g in gyms], stats=stats)

    async def provision_gym(
        self,
        db: Session,
        session: AdminSession,
        request: GymProvisionRequest,
        identity: IdentityServiceClient,
    ) -> GymProvisionResult:
        """
        Crea un gimnasio junto con la cuenta y el perfil de su administrador.

        Args:
            db: Sesión de base de datos
            session: Sesión del super admin
            request: Datos del gimnasio y del administrador
            identity: Cliente del servicio de identidad

        Returns:
            GymProvisionResult: Gimnasio creado y uid del administrador

        Raises:
            EmailAlreadyInUseError: Si el email del admin ya tiene cuenta
            WeakPasswordError: Si el servicio rechaza la contraseña
            BackendUnavailableError: Si falla la escritura en base de datos
        """
        admin = request.admin
        logger.info(f"Alta de gimnasio {request.gym.name!r} solicitada por {session.uid} (admin {admin.admin_email})")

        account = await identity.create_account(admin.admin_email, admin.admin_password)

        try:
            with transaction(db):
                gym_data = request.gym.model_dump()
                gym_data.update({"admin_id": account.uid, "is_active": True})
                gym = gym_repository.create(db, obj_in=gym_data, commit=False)
                user_repository.create(
                    db,
                    obj_in={
                        "uid": account.uid,
                        "email": admin.admin_email,
                        "display_name": admin.admin_name,
                        "role": UserRole.GYM_ADMIN,
                        "gym_id": gym.id,
                        "enrollment_status": EnrollmentStatus.NONE,
                        "created_at": utc_now(),
                    },
                    commit=False,
                )
        except Exception:
            logger.error(f"Falló la escritura del gimnasio; revirtiendo cuenta {account.uid}", exc_info=True)
            await self._delete_identity_account(identity, account)
            raise

        db.refresh(gym)
        logger.info(f"Gimnasio {gym.id} creado con administrador {account.uid}")
        return GymProvisionResult(
            gym=GymSchema.model_validate(gym),
            admin_uid=account.uid,
            admin_email=admin.admin_email,
        )

    async def _delete_identity_account(self, identity: IdentityServiceClient, account: IdentityAccount) -> None:
        try:
            await identity.delete_account(account.id_token)
        except ConsoleError as e:
            # La cuenta queda huérfana; el error original es el que ve el cliente
            logger.error(f"No se pudo eliminar la cuenta huérfana {account.uid}: {e.message}")

    def toggle_active(self, db: Session, session: AdminSession, gym_id: str) -> GymSchema:
        gym = gym_repository.get_or_404(db, gym_id)
        gym = gym_repository.update(db, db_obj=gym, obj_in={"is_active": not gym.is_active})
        logger.info(f"Gimnasio {gym_id} {'activado' if gym.is_active else 'desactivado'} por {session.uid}")
        return GymSchema.model_validate(gym)

    def deactivate(self, db: Session, session: AdminSession, gym_id: str) -> GymSchema:
        """Baja lógica: los gimnasios nunca se borran."""
        gym = gym_repository.get_or_404(db, gym_id)
        if gym.is_active:
            gym = gym_repository.update(db, db_obj=gym, obj_in={"is_active": False})
            logger.info(f"Gimnasio {gym_id} desactivado por {session.uid}")
        return GymSchema.model_validate(gym)

    async def send_admin_password_reset(
        self,
        db: Session,
        session: AdminSession,
        gym_id: str,
        identity: IdentityServiceClient,
    ) -> PasswordResetResult:
        gym = gym_repository.get_or_404(db, gym_id)
        admin = user_repository.get(db, gym.admin_id) if gym.admin_id else None
        email = admin.email if admin is not None and admin.email else None
        if not email:
            raise NotFoundError("El gimnasio no tiene un administrador con email")
        await identity.send_password_reset(email)
        logger.info(f"Restablecimiento de contraseña del admin de {gym_id} solicitado por {session.uid}")
        return PasswordResetResult(email=email)

    # --- Ajustes del admin del gimnasio ---

    def get_own_gym(self, db: Session, session: AdminSession) -> GymSchema:
        return GymSchema.model_validate(self._own_gym(db, session))

    def update_settings(self, db: Session, session: AdminSession, settings_in: GymSettingsUpdate) -> GymSchema:
        gym = self._own_gym(db, session)
        gym = gym_repository.update(db, db_obj=gym, obj_in=settings_in)
        logger.info(f"Ajustes del gimnasio {gym.id} actualizados por {session.uid}")
        return GymSchema.model_validate(gym)

    def _own_gym(self, db: Session, session: AdminSession) -> Gym:
        gym_id = session.require_gym_id()
        gym: Optional[Gym] = gym_repository.get(db, gym_id)
        if gym is None:
            raise NotFoundError("Gimnasio no encontrado para este administrador")
        return gym


gym_service = GymService()

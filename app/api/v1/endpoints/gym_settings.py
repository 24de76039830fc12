from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.db.session import get_db
from app.schemas.gym import Gym as GymSchema, GymSettingsUpdate
from app.services.gym import gym_service

router = APIRouter()


@router.get("/", response_model=GymSchema)
async def read_gym_settings(
    *,
    db: Session = Depends(get_db),
    session: AdminSession = Depends(require_gym_admin),
) -> GymSchema:
    """Datos del gimnasio del admin."""
    return gym_service.get_own_gym(db, session)


@router.put("/", response_model=GymSchema)
async def update_gym_settings(
    *,
    db: Session = Depends(get_db),
    settings_in: GymSettingsUpdate,
    session: AdminSession = Depends(require_gym_admin),
) -> GymSchema:
    """
    Actualizar los ajustes del gimnasio.

    Solo se modifican los campos enviados.

    Args:
        db: Sesión de base de datos
        settings_in: Campos a modificar

    Returns:
        Gym: El gimnasio actualizado
    """
    return gym_service.update_settings(db, session, settings_in)

"""
Endpoints de la consola de super admin para la gestión de gimnasios.
"""

import logging

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_super_admin
from app.db.session import get_db
from app.schemas.auth import PasswordResetResult
from app.schemas.gym import Gym as GymSchema, GymListResponse, GymProvisionRequest, GymProvisionResult
from app.services.gym import gym_service
from app.services.identity import IdentityServiceClient, get_identity_client

logger = logging.getLogger("gym_endpoint")

router = APIRouter()


@router.get("/", response_model=GymListResponse)
async def list_gyms(
    *,
    db: Session = Depends(get_db),
    session: AdminSession = Depends(require_super_admin),
) -> GymListResponse:
    """
    [SUPER ADMIN] Listar todos los gimnasios con estadísticas de plataforma.

    Returns:
        GymListResponse: Gimnasios (más recientes primero) y totales
    """
    return gym_service.list_gyms(db)


@router.post("/", response_model=GymProvisionResult, status_code=status.HTTP_201_CREATED)
async def provision_gym(
    *,
    db: Session = Depends(get_db),
    request_in: GymProvisionRequest,
    session: AdminSession = Depends(require_super_admin),
    identity: IdentityServiceClient = Depends(get_identity_client),
) -> GymProvisionResult:
    """
    [SUPER ADMIN] Crear un gimnasio junto con la cuenta de su administrador.

    Si falla la escritura en base de datos, la cuenta creada en el servicio
    de identidad se elimina.

    Args:
        db: Sesión de base de datos
        request_in: Datos del gimnasio y del administrador

    Returns:
        GymProvisionResult: Gimnasio creado y uid del administrador

    Raises:
        HTTPException 409: Si el email del administrador ya está registrado
        HTTPException 400: Si la contraseña es demasiado débil
    """
    return await gym_service.provision_gym(db, session, request_in, identity)


@router.post("/{gym_id}/toggle-active", response_model=GymSchema)
async def toggle_gym_active(
    *,
    db: Session = Depends(get_db),
    gym_id: str = Path(..., description="ID del gimnasio"),
    session: AdminSession = Depends(require_super_admin),
) -> GymSchema:
    """[SUPER ADMIN] Activar o desactivar un gimnasio."""
    return gym_service.toggle_active(db, session, gym_id)


@router.delete("/{gym_id}", response_model=GymSchema)
async def deactivate_gym(
    *,
    db: Session = Depends(get_db),
    gym_id: str = Path(..., description="ID del gimnasio"),
    session: AdminSession = Depends(require_super_admin),
) -> GymSchema:
    """
    [SUPER ADMIN] "Eliminar" un gimnasio.

    Es una baja lógica: el gimnasio queda inactivo y sus datos se conservan.
    """
    return gym_service.deactivate(db, session, gym_id)


@router.post("/{gym_id}/admin-password-reset", response_model=PasswordResetResult)
async def send_admin_password_reset(
    *,
    db: Session = Depends(get_db),
    gym_id: str = Path(..., description="ID del gimnasio"),
    session: AdminSession = Depends(require_super_admin),
    identity: IdentityServiceClient = Depends(get_identity_client),
) -> PasswordResetResult:
    """[SUPER ADMIN] Enviar email de restablecimiento de contraseña al admin del gimnasio."""
    return await gym_service.send_admin_password_reset(db, session, gym_id, identity)

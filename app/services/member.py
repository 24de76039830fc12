import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.core.config import get_settings
from app.core.date_utils import normalize_date, utc_now
from app.core.errors import PermissionDeniedError
from app.models.user import EnrollmentStatus, UserProfile, UserRole
from app.repositories.check_in import check_in_history_repository
from app.repositories.enrollment import enrollment_repository
from app.repositories.user import user_repository
from app.schemas.attendance import CheckInRecord
from app.schemas.enrollment import Enrollment as EnrollmentSchema
from app.schemas.member import (
    MemberDetail,
    MemberFilter,
    MemberListResponse,
    MemberRow,
    MembershipExpiry,
    MembershipState,
)
from app.schemas.user import UserProfile as UserProfileSchema
from app.services.plan_expiry import membership_expiry

logger = logging.getLogger(__name__)


def matches_filter(
    profile: UserProfile,
    expiry: MembershipExpiry,
    member_filter: MemberFilter,
    now: datetime,
) -> bool:
    """
    Indica si un miembro entra en el filtro de la lista de miembros.
    """
    status = EnrollmentStatus(profile.enrollment_status)
    if member_filter == MemberFilter.ALL:
        return True
    if member_filter == MemberFilter.ACTIVE:
        return status == EnrollmentStatus.APPROVED
    if member_filter == MemberFilter.INACTIVE:
        return status not in (EnrollmentStatus.APPROVED, EnrollmentStatus.PENDING)
    if member_filter == MemberFilter.PENDING:
        return status == EnrollmentStatus.PENDING
    if member_filter == MemberFilter.EXPIRING:
        return expiry.state == MembershipState.EXPIRING_SOON
    if member_filter == MemberFilter.EXPIRED:
        return expiry.state == MembershipState.EXPIRED
    if member_filter == MemberFilter.RECENT:
        created = normalize_date(profile.created_at)
        return created is not None and created >= now - timedelta(days=get_settings().RECENT_MEMBER_DAYS)
    return False


class MemberService:
    def list_members(
        self,
        db: Session,
        session: AdminSession,
        *,
        search: Optional[str] = None,
        member_filter: MemberFilter = MemberFilter.ALL,
        now: Optional[datetime] = None,
    ) -> MemberListResponse:
        """
        Miembros del gimnasio con su vencimiento calculado.

        Args:
            db: Sesión de base de datos
            session: Sesión del operador
            search: Texto a buscar en nombre o email (sin distinguir mayúsculas)
            member_filter: all | active | inactive | pending | expiring | expired | recent
            now: Instante de referencia para el vencimiento

        Returns:
            MemberListResponse: Filas de miembros, más recientes primero
        """
        gym_id = session.require_gym_id()
        now = now or utc_now()
        rows = []
        for profile in user_repository.list_members(db, gym_id=gym_id, search=search):
            expiry = membership_expiry(profile, now)
            if matches_filter(profile, expiry, member_filter, now):
                rows.append(MemberRow(profile=UserProfileSchema.model_validate(profile), expiry=expiry))
        return MemberListResponse(members=rows, total=len(rows))

    def get_member_detail(
        self, db: Session, session: AdminSession, uid: str, now: Optional[datetime] = None
    ) -> MemberDetail:
        gym_id = session.require_gym_id()
        profile = self._get_member(db, session, uid)
        enrollments = enrollment_repository.list_for_user(db, user_id=uid, gym_id=gym_id)
        check_ins = check_in_history_repository.list_for_gym(db, gym_id=gym_id, user_id=uid)
        return MemberDetail(
            profile=UserProfileSchema.model_validate(profile),
            expiry=membership_expiry(profile, now or utc_now()),
            enrollments=[EnrollmentSchema.model_validate(e) for e in enrollments],
            check_ins=[CheckInRecord.model_validate(c) for c in check_ins],
        )

    def delete_member(self, db: Session, session: AdminSession, uid: str) -> None:
        """
        Elimina el perfil del miembro. Sus solicitudes y visitas se conservan
        como histórico.
        """
        self._get_member(db, session, uid)
        user_repository.remove(db, id=uid)
        logger.info(f"Perfil de miembro {uid} eliminado por {session.uid}")

    def _get_member(self, db: Session, session: AdminSession, uid: str) -> UserProfile:
        profile = user_repository.get_or_404(db, uid)
        if profile.role != UserRole.MEMBER:
            raise PermissionDeniedError("Solo se pueden gestionar perfiles de miembros")
        session.ensure_gym_access(profile.gym_id)
        return profile


member_service = MemberService()

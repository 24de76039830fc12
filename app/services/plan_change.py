import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.core.date_utils import utc_now
from app.core.errors import InvalidTransitionError, NotFoundError
from app.db.session import transaction
from app.models.plan_change import PlanChangeRequest, PlanChangeStatus
from app.repositories.plan_change import plan_change_repository
from app.repositories.user import user_repository
from app.schemas.plan_change import (
    PlanChangeDecision,
    PlanChangeListResponse,
    PlanChangeRequest as PlanChangeSchema,
)
from app.schemas.user import UserProfile as UserProfileSchema

logger = logging.getLogger(__name__)


class PlanChangeService:
    """
    Solicitudes de cambio de plan: pending -> approved | rejected.

    Aprobar sobrescribe ``plan_duration`` del perfil y reinicia
    ``enrolled_at``: el nuevo ciclo empieza en el momento de la aprobación,
    no extiende el ciclo anterior.
    """

    def list_requests(
        self,
        db: Session,
        session: AdminSession,
        status: Optional[PlanChangeStatus] = None,
    ) -> PlanChangeListResponse:
        gym_id = session.require_gym_id()
        requests = plan_change_repository.list_for_gym(db, gym_id=gym_id)
        # Ya vienen por fecha descendente; el orden estable deja las pendientes primero
        requests = sorted(requests, key=lambda r: r.status != PlanChangeStatus.PENDING)
        pending_count = sum(1 for r in requests if r.status == PlanChangeStatus.PENDING)
        if status is not None:
            requests = [r for r in requests if r.status == status]
        return PlanChangeListResponse(
            requests=[PlanChangeSchema.model_validate(r) for r in requests],
            pending_count=pending_count,
        )

    def approve(self, db: Session, session: AdminSession, request_id: str) -> PlanChangeDecision:
        """
        Aprueba el cambio de plan y reinicia el ciclo de la membresía.

        Raises:
            NotFoundError: Si la solicitud o el perfil no existen
            PermissionDeniedError: Si la solicitud es de otro gimnasio
            InvalidTransitionError: Si la solicitud ya fue revisada
        """
        request = self._get_request(db, session, request_id)
        now = utc_now()
        with transaction(db):
            self._decide(db, session, request, PlanChangeStatus.APPROVED, now)
            profile = user_repository.get(db, request.user_id)
            if profile is None:
                raise NotFoundError(f"Perfil de usuario {request.user_id} no encontrado")
            profile.plan_duration = request.requested_duration
            profile.enrolled_at = now
            db.add(profile)

        db.refresh(request)
        db.refresh(profile)
        logger.info(
            f"Cambio de plan {request_id} aprobado por {session.uid}: usuario {request.user_id} "
            f"{request.current_duration} -> {request.requested_duration} meses"
        )
        return PlanChangeDecision(
            request=PlanChangeSchema.model_validate(request),
            profile=UserProfileSchema.model_validate(profile),
        )

    def reject(self, db: Session, session: AdminSession, request_id: str) -> PlanChangeDecision:
        """Rechaza la solicitud; el perfil no se modifica."""
        request = self._get_request(db, session, request_id)
        with transaction(db):
            self._decide(db, session, request, PlanChangeStatus.REJECTED, utc_now())
        db.refresh(request)
        logger.info(f"Cambio de plan {request_id} rechazado por {session.uid}")
        return PlanChangeDecision(request=PlanChangeSchema.model_validate(request))

    def _get_request(self, db: Session, session: AdminSession, request_id: str) -> PlanChangeRequest:
        request = plan_change_repository.get_or_404(db, request_id)
        session.ensure_gym_access(request.gym_id)
        return request

    def _decide(
        self,
        db: Session,
        session: AdminSession,
        request: PlanChangeRequest,
        target: PlanChangeStatus,
        now,
    ) -> None:
        updated = plan_change_repository.compare_and_set(
            db,
            request_id=request.id,
            values={"status": target, "reviewed_at": now, "reviewed_by": session.uid},
        )
        if not updated:
            db.refresh(request)
            raise InvalidTransitionError(
                f"La solicitud de cambio de plan ya está en estado '{PlanChangeStatus(request.status).value}'"
            )


plan_change_service = PlanChangeService()

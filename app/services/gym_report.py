import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.core.config import get_settings
from app.core.date_utils import utc_now
from app.core.errors import InvalidTransitionError
from app.models.gym_report import GymReport, ReportStatus
from app.repositories.gym import gym_repository
from app.repositories.gym_report import gym_report_repository
from app.schemas.gym_report import (
    FlaggedGym,
    GymReport as GymReportSchema,
    GymReportListResponse,
    ReportResolution,
)
from app.services.report_aggregation import aggregate_flagged_gyms

logger = logging.getLogger(__name__)

# Transiciones permitidas; "resolved" elimina el registro
ALLOWED_REPORT_TRANSITIONS = {
    ReportStatus.PENDING: {ReportStatus.REVIEWED, ReportStatus.REJECTED, ReportStatus.RESOLVED},
    ReportStatus.REVIEWED: {ReportStatus.RESOLVED},
}


class GymReportService:
    def list_for_gym(self, db: Session, session: AdminSession) -> GymReportListResponse:
        gym_id = session.require_gym_id()
        reports = gym_report_repository.list_for_gym(db, gym_id=gym_id)
        return GymReportListResponse(
            reports=[GymReportSchema.model_validate(r) for r in reports],
            pending_count=sum(1 for r in reports if r.status == ReportStatus.PENDING),
        )

    def mark_reviewed(
        self, db: Session, session: AdminSession, report_id: str, admin_notes: Optional[str] = None
    ) -> GymReportSchema:
        return self._review(db, session, report_id, ReportStatus.REVIEWED, admin_notes)

    def reject(
        self, db: Session, session: AdminSession, report_id: str, admin_notes: Optional[str] = None
    ) -> GymReportSchema:
        return self._review(db, session, report_id, ReportStatus.REJECTED, admin_notes)

    def resolve(self, db: Session, session: AdminSession, report_id: str) -> ReportResolution:
        """
        Resuelve un reporte eliminándolo definitivamente.

        Raises:
            NotFoundError: Si el reporte no existe
            PermissionDeniedError: Si es de otro gimnasio
            InvalidTransitionError: Si ya estaba rechazado
        """
        report = self._get_report(db, session, report_id)
        self._check_transition(report, ReportStatus.RESOLVED)
        gym_report_repository.remove(db, id=report_id)
        logger.info(f"Reporte {report_id} resuelto (eliminado) por {session.uid}")
        return ReportResolution(id=report_id)

    def _review(
        self,
        db: Session,
        session: AdminSession,
        report_id: str,
        target: ReportStatus,
        admin_notes: Optional[str],
    ) -> GymReportSchema:
        report = self._get_report(db, session, report_id)
        self._check_transition(report, target)
        update_data = {"status": target, "reviewed_at": utc_now(), "reviewed_by": session.uid}
        # Las notas solo se sobrescriben si se envía texto
        if admin_notes and admin_notes.strip():
            update_data["admin_notes"] = admin_notes.strip()
        report = gym_report_repository.update(db, db_obj=report, obj_in=update_data)
        logger.info(f"Reporte {report_id} -> {target.value} por {session.uid}")
        return GymReportSchema.model_validate(report)

    def _get_report(self, db: Session, session: AdminSession, report_id: str) -> GymReport:
        report = gym_report_repository.get_or_404(db, report_id)
        session.ensure_gym_access(report.gym_id)
        return report

    @staticmethod
    def _check_transition(report: GymReport, target: ReportStatus) -> None:
        current = ReportStatus(report.status)
        if target not in ALLOWED_REPORT_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(
                f"Un reporte en estado '{current.value}' no puede pasar a '{target.value}'"
            )

    # --- Vista de plataforma (super admin) ---

    def list_platform_reports(self, db: Session, gym_id: Optional[str] = None) -> List[GymReportSchema]:
        reports = gym_report_repository.list_all(db, gym_id=gym_id)
        return [GymReportSchema.model_validate(r) for r in reports]

    def flagged_gyms(self, db: Session) -> List[FlaggedGym]:
        """
        Gimnasios con al menos REPORT_FLAG_THRESHOLD reportes activos.
        """
        reports = gym_report_repository.list_all(db)
        gym_names = gym_repository.get_names(db, (r.gym_id for r in reports))
        flagged = aggregate_flagged_gyms(
            reports,
            threshold=get_settings().REPORT_FLAG_THRESHOLD,
            gym_names=gym_names,
        )
        if flagged:
            logger.info(f"{len(flagged)} gimnasios marcados por reportes activos")
        return [
            FlaggedGym(
                **{k: v for k, v in item.items() if k != "reports"},
                reports=[GymReportSchema.model_validate(r) for r in item["reports"]],
            )
            for item in flagged
        ]


gym_report_service = GymReportService()

import logging
from io import BytesIO

import pandas as pd
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.models.user import EnrollmentStatus, UserRole
from app.repositories.enrollment import enrollment_repository
from app.repositories.user import user_repository
from app.schemas.payments import ReportTotals
from app.services.payments import format_local_date

logger = logging.getLogger(__name__)

REPORT_CSV_COLUMNS = ["Date", "Member", "Email", "Amount", "Payment Method", "Status"]


class ReportService:
    """Totales del gimnasio y exportación completa de inscripciones."""

    def totals(self, db: Session, session: AdminSession) -> ReportTotals:
        gym_id = session.require_gym_id()
        enrollments = enrollment_repository.list_for_gym(db, gym_id=gym_id)
        approved = [e for e in enrollments if e.status == EnrollmentStatus.APPROVED]
        approved_members = user_repository.count(
            db,
            filters={
                "gym_id": gym_id,
                "role": UserRole.MEMBER,
                "enrollment_status": EnrollmentStatus.APPROVED,
            },
        )
        return ReportTotals(
            total_revenue=float(sum(e.amount or 0.0 for e in approved)),
            approved_members=approved_members,
            approved_enrollments=len(approved),
            pending_enrollments=sum(1 for e in enrollments if e.status == EnrollmentStatus.PENDING),
            total_enrollments=len(enrollments),
        )

    def export_csv(self, db: Session, session: AdminSession) -> BytesIO:
        gym_id = session.require_gym_id()
        enrollments = enrollment_repository.list_for_gym(db, gym_id=gym_id)
        timezone_name = session.gym.timezone if session.gym else None

        data = []
        for e in enrollments:
            data.append({
                "Date": format_local_date(e.created_at, timezone_name),
                "Member": e.user_name or "",
                "Email": e.user_email or "",
                "Amount": e.amount or 0.0,
                "Payment Method": e.payment_method or "",
                "Status": EnrollmentStatus(e.status).value,
            })

        df = pd.DataFrame(data, columns=REPORT_CSV_COLUMNS)
        output = BytesIO()
        df.to_csv(output, index=False)
        output.seek(0)
        logger.info(f"Reporte de inscripciones exportado para el gimnasio {gym_id} ({len(data)} filas)")
        return output


report_service = ReportService()

import logging
from io import BytesIO
from typing import List, Optional

import pandas as pd
import pytz
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.core.config import get_settings
from app.core.date_utils import normalize_date
from app.models.enrollment import Enrollment
from app.models.user import EnrollmentStatus
from app.repositories.enrollment import enrollment_repository
from app.schemas.enrollment import Enrollment as EnrollmentSchema
from app.schemas.payments import PaymentListResponse, PaymentTotals

logger = logging.getLogger(__name__)

PAYMENT_CSV_COLUMNS = ["Date", "Member", "Amount", "Method", "Status", "Transaction ID"]


def format_local_date(value, timezone_name: Optional[str] = None) -> str:
    """
    Fecha YYYY-MM-DD en la zona horaria del gimnasio; cadena vacía si no hay fecha.
    """
    moment = normalize_date(value)
    if moment is None:
        return ""
    tz = pytz.timezone(timezone_name or get_settings().DEFAULT_GYM_TIMEZONE)
    return pytz.utc.localize(moment).astimezone(tz).strftime("%Y-%m-%d")


def filter_payments(
    payments: List[Enrollment],
    *,
    search: Optional[str] = None,
    method: Optional[str] = None,
    status: Optional[EnrollmentStatus] = None,
) -> List[Enrollment]:
    """
    Filtra los pagos en memoria.

    ``search`` busca en el nombre del miembro y en el ID de transacción;
    ``method`` compara sin distinguir mayúsculas ("all" desactiva el filtro).
    """
    result = payments
    if search and search.strip():
        needle = search.strip().lower()
        result = [
            p for p in result
            if needle in (p.user_name or "").lower() or needle in (p.transaction_id or "").lower()
        ]
    if method and method.lower() != "all":
        wanted = method.lower()
        result = [p for p in result if (p.payment_method or "").lower() == wanted]
    if status is not None:
        result = [p for p in result if p.status == status]
    return result


def payment_totals(payments: List[Enrollment]) -> PaymentTotals:
    approved = [p for p in payments if p.status == EnrollmentStatus.APPROVED]
    pending = [p for p in payments if p.status == EnrollmentStatus.PENDING]
    return PaymentTotals(
        total_revenue=float(sum(p.amount or 0.0 for p in approved)),
        pending_amount=float(sum(p.amount or 0.0 for p in pending)),
        total_count=len(payments),
        approved_count=len(approved),
        pending_count=len(pending),
    )


class PaymentService:
    def list_payments(
        self,
        db: Session,
        session: AdminSession,
        *,
        search: Optional[str] = None,
        method: Optional[str] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> PaymentListResponse:
        """
        Pagos (solicitudes de inscripción) del gimnasio con sus totales.

        Los totales se calculan sobre la lista ya filtrada.
        """
        payments = self._filtered(db, session, search=search, method=method, status=status)
        return PaymentListResponse(
            payments=[EnrollmentSchema.model_validate(p) for p in payments],
            totals=payment_totals(payments),
        )

    def export_csv(
        self,
        db: Session,
        session: AdminSession,
        *,
        search: Optional[str] = None,
        method: Optional[str] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> BytesIO:
        """
        Exporta los pagos filtrados a CSV.

        Returns:
            BytesIO: CSV con cabecera Date, Member, Amount, Method, Status, Transaction ID
        """
        payments = self._filtered(db, session, search=search, method=method, status=status)
        timezone_name = session.gym.timezone if session.gym else None
        data = [
            {
                "Date": format_local_date(p.created_at, timezone_name),
                "Member": p.user_name or "",
                "Amount": p.amount or 0.0,
                "Method": p.payment_method or "",
                "Status": EnrollmentStatus(p.status).value,
                "Transaction ID": p.transaction_id or "",
            }
            for p in payments
        ]
        df = pd.DataFrame(data, columns=PAYMENT_CSV_COLUMNS)
        output = BytesIO()
        df.to_csv(output, index=False)
        output.seek(0)
        logger.info(f"Exportados {len(payments)} pagos del gimnasio {session.gym_id}")
        return output

    def _filtered(self, db: Session, session: AdminSession, **filters) -> List[Enrollment]:
        gym_id = session.require_gym_id()
        payments = enrollment_repository.list_for_gym(db, gym_id=gym_id)
        return filter_payments(payments, **filters)


payment_service = PaymentService()

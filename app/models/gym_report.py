from sqlalchemy import Column, String, DateTime, Text, JSON, Enum as SQLEnum
import enum

from app.core.date_utils import utc_now
from app.db.base_class import Base, new_id
from app.models.user import _enum_values


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    REJECTED = "rejected"


# Solo los reportes activos cuentan para marcar un gimnasio
ACTIVE_REPORT_STATUSES = frozenset({ReportStatus.PENDING, ReportStatus.REVIEWED})


class GymReport(Base):
    """
    Reporte de incidencia enviado por un miembro.

    Resolver un reporte elimina el registro; no se archiva.
    """
    __tablename__ = "gym_reports"

    id = Column(String(36), primary_key=True, default=new_id)
    gym_id = Column(String(36), nullable=False, index=True)
    gym_name = Column(String(255), nullable=True)
    user_id = Column(String(128), nullable=False)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)
    issue_types = Column(JSON, nullable=False, default=list)  # ["Equipment", "Staff"]
    description = Column(Text, nullable=False, default="")
    status = Column(
        SQLEnum(ReportStatus, name="report_status_enum", values_callable=_enum_values, native_enum=False),
        nullable=False,
        default=ReportStatus.PENDING,
        index=True,
    )
    created_at = Column(DateTime, default=utc_now, index=True)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String(128), nullable=True)
    admin_notes = Column(Text, nullable=True)

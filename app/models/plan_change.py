from sqlalchemy import Column, String, DateTime, Integer, Enum as SQLEnum
import enum

from app.core.date_utils import utc_now
from app.db.base_class import Base, new_id
from app.models.user import _enum_values


class PlanChangeStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PlanChangeRequest(Base):
    """Solicitud de un miembro para cambiar la duración de su plan."""
    __tablename__ = "plan_change_requests"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False, index=True)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)
    gym_id = Column(String(36), nullable=True, index=True)
    gym_name = Column(String(255), nullable=True)
    current_duration = Column(Integer, nullable=False)
    requested_duration = Column(Integer, nullable=False)
    status = Column(
        SQLEnum(PlanChangeStatus, name="plan_change_status_enum", values_callable=_enum_values, native_enum=False),
        nullable=False,
        default=PlanChangeStatus.PENDING,
    )
    created_at = Column(DateTime, default=utc_now, index=True)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String(128), nullable=True)

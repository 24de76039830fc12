from sqlalchemy import Column, String, DateTime, Integer, Enum as SQLEnum
import enum

from app.core.date_utils import utc_now
from app.db.base_class import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "superAdmin"  # Administrador de la plataforma con acceso a todos los gimnasios
    GYM_ADMIN = "gymAdmin"      # Administrador de un gimnasio específico
    MEMBER = "member"           # Miembro (usa la app de miembros, no esta consola)


class EnrollmentStatus(str, enum.Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TimeSlot(str, enum.Enum):
    MORNING = "Morning"
    EVENING = "Evening"
    NIGHT = "Night"


class PaymentMethod(str, enum.Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    # Valores heredados que codificaban la duración del plan
    QUARTERLY = "Quarterly"
    SIX_MONTH = "6-Month"


class UserProfile(Base):
    """
    Perfil canónico de cualquier usuario de la plataforma.

    ``uid`` es el identificador emitido por el servicio de identidad. Un miembro
    solo tiene ``gym_id`` mientras su ``enrollment_status`` es pending o approved.
    """
    __tablename__ = "users"

    uid = Column(String(128), primary_key=True)
    email = Column(String(255), nullable=True, index=True)
    display_name = Column(String(255), nullable=True)
    phone_number = Column(String(30), nullable=True)
    role = Column(
        SQLEnum(UserRole, name="user_role_enum", values_callable=_enum_values, native_enum=False),
        nullable=False,
        default=UserRole.MEMBER,
    )
    gym_id = Column(String(36), nullable=True, index=True)
    enrollment_status = Column(
        SQLEnum(EnrollmentStatus, name="enrollment_status_enum", values_callable=_enum_values, native_enum=False),
        nullable=False,
        default=EnrollmentStatus.NONE,
    )
    payment_method = Column(String(30), nullable=True)
    transaction_id = Column(String(255), nullable=True)
    plan_duration = Column(Integer, nullable=True)  # meses; None = inferir de payment_method
    time_slot = Column(
        SQLEnum(TimeSlot, name="time_slot_enum", values_callable=_enum_values, native_enum=False),
        nullable=True,
    )
    enrolled_at = Column(DateTime, nullable=True)  # ancla del cálculo de vencimiento
    created_at = Column(DateTime, default=utc_now, index=True)

    @property
    def id(self) -> str:
        return self.uid

    def __repr__(self):
        return f"<UserProfile {self.uid} role={self.role} status={self.enrollment_status}>"

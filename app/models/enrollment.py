from sqlalchemy import Column, String, DateTime, Float, Index, Enum as SQLEnum

from app.core.date_utils import utc_now
from app.db.base_class import Base, new_id
from app.models.user import EnrollmentStatus, _enum_values


class Enrollment(Base):
    """
    Solicitud de pago/verificación de un miembro para unirse o renovar en un gimnasio.

    Se mantiene sincronizada con ``UserProfile.enrollment_status``; ambas
    escrituras se hacen en la misma transacción.
    """
    __tablename__ = "enrollments"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False, index=True)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)
    gym_id = Column(String(36), nullable=False, index=True)
    gym_name = Column(String(255), nullable=True)
    payment_method = Column(String(30), nullable=True)
    transaction_id = Column(String(255), nullable=True)
    amount = Column(Float, nullable=False, default=0.0)
    status = Column(
        SQLEnum(EnrollmentStatus, name="enrollment_record_status_enum", values_callable=_enum_values, native_enum=False),
        nullable=False,
        default=EnrollmentStatus.PENDING,
        index=True,
    )
    created_at = Column(DateTime, default=utc_now, index=True)
    verified_at = Column(DateTime, nullable=True)
    verified_by = Column(String(128), nullable=True)

    __table_args__ = (
        Index("ix_enrollments_user_gym", "user_id", "gym_id"),
    )

    def __repr__(self):
        return f"<Enrollment {self.id} user={self.user_id} gym={self.gym_id} status={self.status}>"

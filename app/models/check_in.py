from sqlalchemy import Column, String, DateTime, Integer

from app.core.date_utils import utc_now
from app.db.base_class import Base, new_id


class ActiveCheckIn(Base):
    """Miembro presente ahora mismo en el gimnasio."""
    __tablename__ = "active_check_ins"

    id = Column(String(36), primary_key=True, default=new_id)
    gym_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(128), nullable=False, index=True)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)
    check_in_time = Column(DateTime, nullable=False, default=utc_now)


class CheckInHistory(Base):
    """Visita completada; la app de miembros la crea al hacer check-out."""
    __tablename__ = "check_in_history"

    id = Column(String(36), primary_key=True, default=new_id)
    gym_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(128), nullable=False, index=True)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)
    check_in_time = Column(DateTime, nullable=False)
    check_out_time = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=True)  # segundos
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD local del gimnasio

from sqlalchemy import Column, String, Boolean, DateTime, Float, Integer, JSON, Text

from app.core.date_utils import utc_now
from app.db.base_class import Base, new_id


class Gym(Base):
    """
    Gimnasio (tenant) de la plataforma.

    Lo crea un super admin junto con su cuenta de administrador (``admin_id``)
    y nunca se borra: "eliminar" equivale a desactivarlo.
    """
    __tablename__ = "gyms"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    address = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    upi_id = Column(String(100), nullable=True)

    # Precios
    monthly_fee = Column(Float, nullable=False, default=0.0)
    quarterly_fee = Column(Float, nullable=True)
    semi_annual_fee = Column(Float, nullable=True)

    amenities = Column(JSON, nullable=True)  # ["Cardio", "Sauna"]
    opening_hours = Column(String(255), nullable=True)
    capacity = Column(Integer, nullable=True)
    timezone = Column(String(50), nullable=True)  # Zona horaria del gimnasio (ej: 'Asia/Kolkata')

    admin_id = Column(String(128), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utc_now, index=True)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    def __repr__(self):
        return f"<Gym {self.id} {self.name!r} active={self.is_active}>"

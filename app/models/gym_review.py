from sqlalchemy import Column, String, DateTime, Integer, Text, CheckConstraint

from app.core.date_utils import utc_now
from app.db.base_class import Base, new_id


class GymReview(Base):
    """Valoración (1-5 estrellas) de un miembro. Solo lectura en la consola."""
    __tablename__ = "gym_reviews"

    id = Column(String(36), primary_key=True, default=new_id)
    gym_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(128), nullable=False)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)
    user_phone = Column(String(30), nullable=True)
    user_image = Column(String(500), nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now, index=True)

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_gym_reviews_rating_range"),
    )

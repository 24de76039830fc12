from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession, require_gym_admin
from app.db.session import get_db
from app.schemas.gym_review import ReviewSummary
from app.services.gym_review import gym_review_service

router = APIRouter()


@router.get("/", response_model=ReviewSummary)
async def list_reviews(
    *,
    db: Session = Depends(get_db),
    session: AdminSession = Depends(require_gym_admin),
) -> ReviewSummary:
    """Reseñas del gimnasio con valoración media y distribución por estrellas."""
    return gym_review_service.get_summary(db, session)

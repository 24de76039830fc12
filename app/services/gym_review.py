from collections import Counter

from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.repositories.gym_review import gym_review_repository
from app.schemas.gym_review import GymReview as GymReviewSchema, ReviewSummary


class GymReviewService:
    def get_summary(self, db: Session, session: AdminSession) -> ReviewSummary:
        """Reseñas del gimnasio con media y distribución de 1 a 5 estrellas."""
        gym_id = session.require_gym_id()
        reviews = gym_review_repository.list_for_gym(db, gym_id=gym_id)
        counts = Counter(r.rating for r in reviews)
        average = sum(r.rating for r in reviews) / len(reviews) if reviews else 0.0
        return ReviewSummary(
            reviews=[GymReviewSchema.model_validate(r) for r in reviews],
            total=len(reviews),
            average_rating=round(average, 1),
            distribution={stars: counts.get(stars, 0) for stars in range(1, 6)},
        )


gym_review_service = GymReviewService()

from typing import List

from sqlalchemy.orm import Session

from app.models.gym_review import GymReview
from app.repositories.base import BaseRepository
from app.schemas.gym_review import GymReview as GymReviewSchema


class GymReviewRepository(BaseRepository[GymReview, GymReviewSchema, GymReviewSchema]):
    def list_for_gym(self, db: Session, *, gym_id: str) -> List[GymReview]:
        return self.list(db, filters={"gym_id": gym_id}, order_by="created_at", descending=True)


gym_review_repository = GymReviewRepository(GymReview)

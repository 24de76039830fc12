from typing import Optional, List, Dict
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class GymReview(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    gym_id: str
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    user_image: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


class ReviewSummary(BaseModel):
    reviews: List[GymReview]
    total: int
    average_rating: float
    distribution: Dict[int, int]

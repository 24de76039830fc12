from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from app.models.user import EnrollmentStatus
from app.schemas.user import UserProfile


class Enrollment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    gym_id: str
    gym_name: Optional[str] = None
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    amount: float = 0.0
    status: EnrollmentStatus
    created_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None


class EnrollmentTransitionResult(BaseModel):
    """Estado de ambos registros después de una transición"""
    enrollment: Optional[Enrollment] = None
    profile: UserProfile
    changed: bool = Field(True, description="False si la operación fue idempotente (ya estaba en ese estado)")


class EnrollmentCounts(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    approved_revenue: float


class EnrollmentListResponse(BaseModel):
    enrollments: List[Enrollment]
    counts: EnrollmentCounts

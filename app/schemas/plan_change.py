from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from app.models.plan_change import PlanChangeStatus
from app.schemas.user import UserProfile


class PlanChangeRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    gym_id: Optional[str] = None
    current_duration: int
    requested_duration: int
    status: PlanChangeStatus
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    gym_name: Optional[str] = None


class PlanChangeListResponse(BaseModel):
    requests: List[PlanChangeRequest]
    pending_count: int


class PlanChangeDecision(BaseModel):
    request: PlanChangeRequest
    profile: Optional[UserProfile] = None

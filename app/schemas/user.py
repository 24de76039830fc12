from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from app.models.user import UserRole, EnrollmentStatus, TimeSlot


class UserProfile(BaseModel):
    """Perfil tal como lo ve la consola"""
    model_config = ConfigDict(from_attributes=True)

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    phone_number: Optional[str] = None
    role: UserRole
    gym_id: Optional[str] = None
    enrollment_status: EnrollmentStatus = EnrollmentStatus.NONE
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    plan_duration: Optional[int] = None
    time_slot: Optional[TimeSlot] = None
    enrolled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

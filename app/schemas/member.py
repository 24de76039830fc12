from typing import Optional, List
from datetime import datetime
from enum import Enum
from pydantic import BaseModel
from app.schemas.user import UserProfile
from app.schemas.enrollment import Enrollment
from app.schemas.attendance import CheckInRecord


class MembershipState(str, Enum):
    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


class MemberFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    RECENT = "recent"


class MembershipExpiry(BaseModel):
    plan_duration: int
    expiry_date: Optional[datetime] = None
    state: Optional[MembershipState] = None
    days_remaining: Optional[int] = None


class MemberRow(BaseModel):
    profile: UserProfile
    expiry: MembershipExpiry


class MemberListResponse(BaseModel):
    members: List[MemberRow]
    total: int


class MemberDetail(BaseModel):
    profile: UserProfile
    expiry: MembershipExpiry
    enrollments: List[Enrollment]
    check_ins: List[CheckInRecord]

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class ActiveCheckIn(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    check_in_time: datetime
    elapsed_seconds: Optional[int] = None


class CheckInRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    duration: Optional[int] = None
    date: str


class AttendanceSummary(BaseModel):
    date: str
    total_today: int
    currently_in: int
    completed: int
    average_duration_seconds: Optional[int] = None


class AttendanceToday(BaseModel):
    summary: AttendanceSummary
    active: List[ActiveCheckIn]
    completed: List[CheckInRecord]

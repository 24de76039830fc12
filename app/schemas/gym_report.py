from typing import Optional, List, Dict
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from app.models.gym_report import ReportStatus


class GymReport(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    gym_id: str
    gym_name: Optional[str] = None
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    issue_types: List[str] = []
    description: str = ""
    status: ReportStatus
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    admin_notes: Optional[str] = None


class GymReportListResponse(BaseModel):
    reports: List[GymReport]
    pending_count: int


class ReportReview(BaseModel):
    admin_notes: Optional[str] = Field(None, max_length=2000)


class ReportResolution(BaseModel):
    id: str
    deleted: bool = True


class FlaggedGym(BaseModel):
    gym_id: str
    gym_name: Optional[str] = None
    total_reports: int
    pending_reports: int
    issue_breakdown: Dict[str, int]
    reports: List[GymReport]

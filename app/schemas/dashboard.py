from typing import List
from pydantic import BaseModel
from app.schemas.enrollment import Enrollment


class DashboardSummary(BaseModel):
    """Indicadores de la pantalla principal del admin del gimnasio"""
    active_members: int
    pending_enrollments: int
    today_revenue: float
    pending_list: List[Enrollment]
    recent_payments: List[Enrollment]

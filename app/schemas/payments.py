from typing import List
from pydantic import BaseModel
from app.schemas.enrollment import Enrollment


class PaymentTotals(BaseModel):
    total_revenue: float
    pending_amount: float
    total_count: int
    approved_count: int
    pending_count: int


class PaymentListResponse(BaseModel):
    payments: List[Enrollment]
    totals: PaymentTotals


class ReportTotals(BaseModel):
    total_revenue: float
    approved_members: int
    approved_enrollments: int
    pending_enrollments: int
    total_enrollments: int

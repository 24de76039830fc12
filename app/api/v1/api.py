from fastapi import APIRouter

from app.api.v1.endpoints import (
    attendance,
    auth,
    dashboard,
    enrollments,
    gym_reports,
    gym_settings,
    gyms,
    members,
    payments,
    plan_changes,
    platform_reports,
    reports,
    reviews,
)

api_router = APIRouter()

# Autenticación y sesión
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Consola de super admin
api_router.include_router(gyms.router, prefix="/gyms", tags=["gyms"])
api_router.include_router(platform_reports.router, prefix="/platform", tags=["platform"])

# Consola del admin de gimnasio
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["enrollments"])
api_router.include_router(members.router, prefix="/members", tags=["members"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(plan_changes.router, prefix="/plan-changes", tags=["plan-changes"])
api_router.include_router(gym_reports.router, prefix="/gym-reports", tags=["gym-reports"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
api_router.include_router(gym_settings.router, prefix="/settings", tags=["settings"])

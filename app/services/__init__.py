"""
Servicios de la consola de administración.

Implementan la lógica de negocio: reciben la sesión de base de datos y la
sesión explícita del operador, y hablan con repositorios y con el servicio
de identidad externo.
"""

from app.services.attendance import attendance_service
from app.services.console_auth import console_auth_service
from app.services.dashboard import dashboard_service
from app.services.enrollment import enrollment_service
from app.services.gym import gym_service
from app.services.gym_report import gym_report_service
from app.services.gym_review import gym_review_service
from app.services.member import member_service
from app.services.payments import payment_service
from app.services.plan_change import plan_change_service
from app.services.reports import report_service

__all__ = [
    "attendance_service",
    "console_auth_service",
    "dashboard_service",
    "enrollment_service",
    "gym_service",
    "gym_report_service",
    "gym_review_service",
    "member_service",
    "payment_service",
    "plan_change_service",
    "report_service",
]

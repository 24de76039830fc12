"""
Cálculo de vencimiento de membresías.

El vencimiento es ``enrolled_at`` + N meses de calendario (no N*30 días).
Cuando el día no existe en el mes destino se ajusta al último día de ese mes
(31-ene + 1 mes = 28-feb, o 29-feb en bisiesto). Solo los perfiles aprobados
con ``enrolled_at`` tienen vencimiento; el resto nunca está "vencido".
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from app.core.config import get_settings
from app.core.date_utils import normalize_date, utc_now
from app.models.user import EnrollmentStatus, PaymentMethod
from app.schemas.member import MembershipExpiry, MembershipState

logger = logging.getLogger(__name__)

# Duraciones implícitas en los métodos de pago heredados
LEGACY_PAYMENT_DURATIONS = {
    PaymentMethod.QUARTERLY.value: 3,
    PaymentMethod.SIX_MONTH.value: 6,
}


def add_months(start: datetime, months: int) -> datetime:
    """Suma meses de calendario ajustando al último día del mes si hace falta."""
    return start + relativedelta(months=months)


def infer_plan_duration(plan_duration: Optional[int], payment_method: Optional[str]) -> int:
    """
    Duración efectiva del plan en meses.

    Usa ``plan_duration`` si está definido; si no, la deduce del método de
    pago heredado ("Quarterly" -> 3, "6-Month" -> 6) y por defecto 1.
    """
    if plan_duration:
        return int(plan_duration)
    if payment_method in LEGACY_PAYMENT_DURATIONS:
        return LEGACY_PAYMENT_DURATIONS[payment_method]
    return get_settings().DEFAULT_PLAN_DURATION_MONTHS


def compute_expiry(enrolled_at: Any, plan_duration_months: int) -> Optional[datetime]:
    start = normalize_date(enrolled_at)
    if start is None:
        return None
    return add_months(start, plan_duration_months)


def classify_expiry(expiry: datetime, now: datetime, soon_days: Optional[int] = None) -> MembershipState:
    """
    Clasifica un vencimiento: expired si ya pasó, expiring_soon si faltan
    ``soon_days`` días o menos, active en otro caso.
    """
    if soon_days is None:
        soon_days = get_settings().EXPIRING_SOON_DAYS
    remaining = expiry - now
    if remaining < timedelta(0):
        return MembershipState.EXPIRED
    if remaining <= timedelta(days=soon_days):
        return MembershipState.EXPIRING_SOON
    return MembershipState.ACTIVE


def membership_expiry(profile: Any, now: Optional[datetime] = None) -> MembershipExpiry:
    """
    Vencimiento y estado de la membresía de un perfil.

    Args:
        profile: Perfil (modelo o esquema) con enrollment_status, enrolled_at,
            plan_duration y payment_method
        now: Instante de referencia (por defecto, ahora en UTC)

    Returns:
        MembershipExpiry: Duración efectiva, fecha de vencimiento, estado y días restantes
    """
    duration = infer_plan_duration(profile.plan_duration, profile.payment_method)
    status = profile.enrollment_status
    if status != EnrollmentStatus.APPROVED:
        return MembershipExpiry(plan_duration=duration)

    expiry = compute_expiry(profile.enrolled_at, duration)
    if expiry is None:
        return MembershipExpiry(plan_duration=duration)

    now = now or utc_now()
    state = classify_expiry(expiry, now)
    days_remaining = (expiry - now).days if state != MembershipState.EXPIRED else 0
    return MembershipExpiry(
        plan_duration=duration,
        expiry_date=expiry,
        state=state,
        days_remaining=days_remaining,
    )

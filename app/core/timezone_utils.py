"""
Utilidades para el manejo de zonas horarias del gimnasio.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import pytz


def get_current_time_in_gym_timezone(gym_timezone: str, now: Optional[datetime] = None) -> datetime:
    """
    Obtiene la hora actual en la zona horaria del gimnasio.

    Args:
        gym_timezone: Zona horaria del gimnasio (ej: 'Asia/Kolkata')
        now: Instante de referencia naive UTC (por defecto, ahora)

    Returns:
        Datetime aware representando la hora actual en la zona horaria del gimnasio
    """
    if now is None:
        utc_now = datetime.now(timezone.utc)
    else:
        utc_now = now.replace(tzinfo=timezone.utc) if now.tzinfo is None else now
    return utc_now.astimezone(pytz.timezone(gym_timezone))


def gym_day_bounds_utc(gym_timezone: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Calcula el inicio y fin del día local del gimnasio expresados en UTC naive.

    "Hoy" en el dashboard significa desde la medianoche local del gimnasio,
    no desde la medianoche UTC.

    Returns:
        Tuple[datetime, datetime]: (inicio, fin) del día en UTC sin tzinfo
    """
    tz = pytz.timezone(gym_timezone)
    local_now = get_current_time_in_gym_timezone(gym_timezone, now)
    local_day = datetime(local_now.year, local_now.month, local_now.day)
    start = tz.localize(local_day).astimezone(timezone.utc).replace(tzinfo=None)
    next_midnight = tz.localize(local_day + timedelta(days=1))
    end = next_midnight.astimezone(timezone.utc).replace(tzinfo=None)
    return start, end


def gym_local_date_str(gym_timezone: str, now: Optional[datetime] = None) -> str:
    """Fecha local del gimnasio en formato YYYY-MM-DD (clave ``date`` del historial)."""
    return get_current_time_in_gym_timezone(gym_timezone, now).strftime("%Y-%m-%d")


def is_valid_timezone(name: str) -> bool:
    return name in pytz.all_timezones_set

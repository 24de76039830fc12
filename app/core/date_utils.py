"""
Normalización de marcas de tiempo heterogéneas.

Los registros llegan con fechas en formatos distintos según su origen
(datetime nativo, objetos timestamp serializados con ``seconds``, epoch
numérico o cadenas ISO-8601). ``normalize_date`` las convierte todas a un
``datetime`` naive en UTC y devuelve ``None`` cuando la entrada no se puede
interpretar; nunca lanza excepciones.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Epoch en milisegundos a partir de este valor (año 2001 en segundos ~ 1e9)
_MILLISECONDS_THRESHOLD = 1e11


def utc_now() -> datetime:
    """Hora actual del servidor en UTC, naive (formato de almacenamiento)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _from_epoch(seconds: float) -> Optional[datetime]:
    if seconds != seconds:  # NaN
        return None
    if abs(seconds) >= _MILLISECONDS_THRESHOLD:
        seconds = seconds / 1000.0
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
    except (OverflowError, OSError, ValueError):
        return None


def normalize_date(value: Any) -> Optional[datetime]:
    """
    Convierte cualquier representación de fecha soportada en un datetime naive UTC.

    Args:
        value: datetime, date, objeto con ``to_datetime()``/``toDate()``, objeto o
            dict con ``seconds`` (y opcionalmente ``nanoseconds``), cadena ISO-8601
            o epoch numérico (segundos o milisegundos)

    Returns:
        Optional[datetime]: Fecha normalizada o None si no se pudo interpretar
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        if isinstance(value, datetime):
            return _to_naive_utc(value)

        if isinstance(value, date):
            return datetime.combine(value, time.min)

        for method_name in ("to_datetime", "toDate"):
            converter = getattr(value, method_name, None)
            if callable(converter):
                return normalize_date(converter())

        if isinstance(value, dict):
            seconds = value.get("seconds", value.get("_seconds"))
            nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        else:
            seconds = getattr(value, "seconds", None)
            nanos = getattr(value, "nanoseconds", 0) or 0
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return _from_epoch(float(seconds) + float(nanos) / 1e9)

        if isinstance(value, (int, float)):
            # 0 se trata como ausente, igual que un valor vacío
            return _from_epoch(float(value)) if value else None

        if isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            return _to_naive_utc(date_parser.isoparse(text))
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Fecha no interpretable {value!r}: {e}")
        return None

    return None

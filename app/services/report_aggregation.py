import logging
from collections import Counter, defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from app.core.date_utils import normalize_date
from app.models.gym_report import ACTIVE_REPORT_STATUSES, ReportStatus

logger = logging.getLogger(__name__)


def _is_active(report: Any) -> bool:
    try:
        return ReportStatus(report.status) in ACTIVE_REPORT_STATUSES
    except ValueError:
        return False


def _created_key(report: Any) -> datetime:
    return normalize_date(report.created_at) or datetime.min


def aggregate_flagged_gyms(
    reports: Iterable[Any],
    threshold: int = 3,
    gym_names: Optional[Dict[str, str]] = None,
) -> List[Dict[str, Any]]:
    """
    Agrupa los reportes activos (pending/reviewed) por gimnasio y marca los que
    alcanzan ``threshold``.

    Un reporte con varios tipos de incidencia suma uno a cada tipo. Los
    gimnasios marcados se devuelven por total de reportes activos descendente
    y sus reportes del más reciente al más antiguo.

    Args:
        reports: Reportes de todos los gimnasios
        threshold: Número mínimo de reportes activos para marcar un gimnasio
        gym_names: Nombres de gimnasio por id (si no, se usa el del reporte)

    Returns:
        List[Dict[str, Any]]: Un dict por gimnasio marcado con gym_id, gym_name,
        total_reports, pending_reports, issue_breakdown y reports
    """
    gym_names = gym_names or {}
    grouped: Dict[str, List[Any]] = defaultdict(list)
    for report in reports:
        if _is_active(report):
            grouped[report.gym_id].append(report)

    flagged = []
    for gym_id, gym_reports in grouped.items():
        if len(gym_reports) < threshold:
            continue
        breakdown: Counter = Counter()
        for report in gym_reports:
            breakdown.update(report.issue_types or [])
        flagged.append({
            "gym_id": gym_id,
            "gym_name": gym_names.get(gym_id) or gym_reports[0].gym_name,
            "total_reports": len(gym_reports),
            "pending_reports": sum(1 for r in gym_reports if ReportStatus(r.status) == ReportStatus.PENDING),
            "issue_breakdown": dict(breakdown),
            "reports": sorted(gym_reports, key=_created_key, reverse=True),
        })

    # Orden estable: a igual total, por gym_id para que el resultado sea determinista
    flagged.sort(key=lambda g: g["gym_id"])
    flagged.sort(key=lambda g: g["total_reports"], reverse=True)
    logger.debug(f"{len(flagged)} gimnasios marcados de {len(grouped)} con reportes activos")
    return flagged

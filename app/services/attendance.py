import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.core.config import get_settings
from app.core.date_utils import normalize_date, utc_now
from app.core.timezone_utils import gym_local_date_str
from app.repositories.check_in import active_check_in_repository, check_in_history_repository
from app.schemas.attendance import ActiveCheckIn, AttendanceSummary, AttendanceToday, CheckInRecord

logger = logging.getLogger(__name__)


class AttendanceService:
    """
    Asistencia del gimnasio: quién está dentro ahora y las visitas cerradas.

    Las visitas cerradas se agrupan por la clave ``date`` (YYYY-MM-DD en la
    zona horaria del gimnasio) que escribe la app de miembros al hacer check-out.
    """

    def get_today(self, db: Session, session: AdminSession, now: Optional[datetime] = None) -> AttendanceToday:
        gym_id = session.require_gym_id()
        now = now or utc_now()
        today = gym_local_date_str(self._timezone(session), now)

        active = []
        for check_in in active_check_in_repository.list_for_gym(db, gym_id=gym_id):
            item = ActiveCheckIn.model_validate(check_in)
            started = normalize_date(check_in.check_in_time)
            if started is not None:
                item.elapsed_seconds = max(0, int((now - started).total_seconds()))
            active.append(item)

        completed = check_in_history_repository.list_for_gym(db, gym_id=gym_id, date_from=today, date_to=today)
        durations = [c.duration for c in completed if c.duration is not None]

        summary = AttendanceSummary(
            date=today,
            total_today=len(active) + len(completed),
            currently_in=len(active),
            completed=len(completed),
            average_duration_seconds=int(sum(durations) / len(durations)) if durations else None,
        )
        return AttendanceToday(
            summary=summary,
            active=active,
            completed=[CheckInRecord.model_validate(c) for c in completed],
        )

    def get_history(
        self,
        db: Session,
        session: AdminSession,
        *,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[CheckInRecord]:
        """
        Historial de visitas entre dos fechas locales (inclusivas).

        Args:
            db: Sesión de base de datos
            session: Sesión del operador
            date_from: Fecha inicial YYYY-MM-DD
            date_to: Fecha final YYYY-MM-DD
            user_id: Limitar a un miembro

        Returns:
            List[CheckInRecord]: Visitas, las más recientes primero
        """
        gym_id = session.require_gym_id()
        records = check_in_history_repository.list_for_gym(
            db, gym_id=gym_id, date_from=date_from, date_to=date_to, user_id=user_id
        )
        return [CheckInRecord.model_validate(r) for r in records]

    @staticmethod
    def _timezone(session: AdminSession) -> str:
        if session.gym and session.gym.timezone:
            return session.gym.timezone
        return get_settings().DEFAULT_GYM_TIMEZONE


attendance_service = AttendanceService()

from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.check_in import ActiveCheckIn, CheckInHistory
from app.repositories.base import BaseRepository
from app.schemas.attendance import ActiveCheckIn as ActiveCheckInSchema, CheckInRecord


class ActiveCheckInRepository(BaseRepository[ActiveCheckIn, ActiveCheckInSchema, ActiveCheckInSchema]):
    def list_for_gym(self, db: Session, *, gym_id: str) -> List[ActiveCheckIn]:
        return self.list(db, filters={"gym_id": gym_id}, order_by="check_in_time", descending=True)


class CheckInHistoryRepository(BaseRepository[CheckInHistory, CheckInRecord, CheckInRecord]):
    def list_for_gym(
        self,
        db: Session,
        *,
        gym_id: str,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[CheckInHistory]:
        """
        Historial de visitas de un gimnasio, más recientes primero.

        ``date_from``/``date_to`` son claves YYYY-MM-DD inclusivas; se comparan
        como texto porque ese formato ordena igual que la fecha.
        """
        records = self.list(
            db,
            filters={"gym_id": gym_id, "user_id": user_id},
            order_by="check_in_time",
            descending=True,
        )
        if date_from:
            records = [r for r in records if r.date >= date_from]
        if date_to:
            records = [r for r in records if r.date <= date_to]
        return records


active_check_in_repository = ActiveCheckInRepository(ActiveCheckIn)
check_in_history_repository = CheckInHistoryRepository(CheckInHistory)

from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.gym_report import GymReport
from app.repositories.base import BaseRepository
from app.schemas.gym_report import GymReport as GymReportSchema


class GymReportRepository(BaseRepository[GymReport, GymReportSchema, GymReportSchema]):
    def list_for_gym(self, db: Session, *, gym_id: str) -> List[GymReport]:
        return self.list(db, filters={"gym_id": gym_id}, order_by="created_at", descending=True)

    def list_all(self, db: Session, *, gym_id: Optional[str] = None) -> List[GymReport]:
        """Reportes de toda la plataforma (o de un gimnasio), los más recientes primero."""
        return self.list(db, filters={"gym_id": gym_id}, order_by="created_at", descending=True)


gym_report_repository = GymReportRepository(GymReport)

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import classify_backend_error
from app.models.plan_change import PlanChangeRequest, PlanChangeStatus
from app.repositories.base import BaseRepository
from app.schemas.plan_change import PlanChangeRequest as PlanChangeSchema


class PlanChangeRepository(BaseRepository[PlanChangeRequest, PlanChangeSchema, PlanChangeSchema]):
    def list_for_gym(self, db: Session, *, gym_id: str, status: Optional[PlanChangeStatus] = None) -> List[PlanChangeRequest]:
        return self.list(db, filters={"gym_id": gym_id, "status": status}, order_by="created_at", descending=True)

    def compare_and_set(self, db: Session, *, request_id: str, values: Dict[str, Any]) -> int:
        """Actualiza la solicitud solo si sigue pendiente. No confirma la transacción."""
        try:
            return (
                db.query(PlanChangeRequest)
                .filter(PlanChangeRequest.id == request_id, PlanChangeRequest.status == PlanChangeStatus.PENDING)
                .update(values, synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            db.rollback()
            raise classify_backend_error(e) from e


plan_change_repository = PlanChangeRepository(PlanChangeRequest)

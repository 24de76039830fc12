from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import classify_backend_error
from app.models.enrollment import Enrollment
from app.models.user import EnrollmentStatus
from app.repositories.base import BaseRepository
from app.schemas.enrollment import Enrollment as EnrollmentSchema


class EnrollmentRepository(BaseRepository[Enrollment, EnrollmentSchema, EnrollmentSchema]):
    def list_for_gym(
        self,
        db: Session,
        *,
        gym_id: str,
        status: Optional[EnrollmentStatus] = None,
        limit: Optional[int] = None,
    ) -> List[Enrollment]:
        """
        Solicitudes de un gimnasio, las más recientes primero.

        Args:
            db: Sesión de base de datos
            gym_id: ID del gimnasio
            status: Filtrar por estado (opcional)
            limit: Máximo de registros tras ordenar

        Returns:
            List[Enrollment]: Solicitudes ordenadas por created_at descendente
        """
        return self.list(
            db,
            filters={"gym_id": gym_id, "status": status},
            order_by="created_at",
            descending=True,
            limit=limit,
        )

    def list_for_user(self, db: Session, *, user_id: str, gym_id: Optional[str] = None) -> List[Enrollment]:
        return self.list(db, filters={"user_id": user_id, "gym_id": gym_id}, order_by="created_at", descending=True)

    def find_matching(
        self,
        db: Session,
        *,
        user_id: str,
        gym_id: str,
        status: Optional[EnrollmentStatus] = None,
    ) -> Optional[Enrollment]:
        """
        Solicitud "correspondiente" a un usuario en un gimnasio.

        Si hay varias, gana la de ``created_at`` más reciente y, a igualdad,
        la de mayor id. Las fechas nulas quedan al final.
        """
        query = db.query(Enrollment).filter(Enrollment.user_id == user_id, Enrollment.gym_id == gym_id)
        if status is not None:
            query = query.filter(Enrollment.status == status)
        query = query.order_by(Enrollment.created_at.desc().nulls_last(), Enrollment.id.desc())
        try:
            return query.first()
        except SQLAlchemyError as e:
            db.rollback()
            raise classify_backend_error(e) from e

    def compare_and_set(
        self,
        db: Session,
        *,
        enrollment_id: str,
        expected: Iterable[EnrollmentStatus],
        values: Dict[str, Any],
    ) -> int:
        """
        Actualiza la solicitud solo si su estado actual está en ``expected``.

        No confirma la transacción. Devuelve el número de filas modificadas
        (0 si otro operador ya la cambió).
        """
        try:
            return (
                db.query(Enrollment)
                .filter(Enrollment.id == enrollment_id, Enrollment.status.in_(list(expected)))
                .update(values, synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            db.rollback()
            raise classify_backend_error(e) from e


enrollment_repository = EnrollmentRepository(Enrollment)

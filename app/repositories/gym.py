from typing import Dict, Iterable, List

from sqlalchemy.orm import Session

from app.models.gym import Gym
from app.repositories.base import BaseRepository
from app.schemas.gym import GymCreate, GymSettingsUpdate


class GymRepository(BaseRepository[Gym, GymCreate, GymSettingsUpdate]):
    def list_newest_first(self, db: Session) -> List[Gym]:
        """Todos los gimnasios, los más recientes primero."""
        return self.list(db, order_by="created_at", descending=True)

    def get_names(self, db: Session, gym_ids: Iterable[str]) -> Dict[str, str]:
        """Mapa id -> nombre para los gimnasios indicados."""
        ids = list(set(gym_ids))
        if not ids:
            return {}
        rows = db.query(Gym.id, Gym.name).filter(Gym.id.in_(ids)).all()
        return {row.id: row.name for row in rows}


gym_repository = GymRepository(Gym)

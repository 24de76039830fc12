from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.user import UserProfile, UserRole
from app.repositories.base import BaseRepository
from app.schemas.user import UserProfile as UserProfileSchema


class UserRepository(BaseRepository[UserProfile, UserProfileSchema, UserProfileSchema]):
    def list_members(self, db: Session, *, gym_id: str, search: Optional[str] = None) -> List[UserProfile]:
        """
        Miembros asociados a un gimnasio, más recientes primero.

        La búsqueda se hace sobre nombre y email sin distinguir mayúsculas.
        """
        members = self.list(
            db,
            filters={"gym_id": gym_id, "role": UserRole.MEMBER},
            order_by="created_at",
            descending=True,
        )
        if search:
            needle = search.strip().lower()
            members = [
                m for m in members
                if needle in (m.display_name or "").lower() or needle in (m.email or "").lower()
            ]
        return members


user_repository = UserRepository(UserProfile)

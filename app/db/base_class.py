import re
import uuid
from typing import Any

from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    id: Any
    __name__: str

    # Nombre de tabla por defecto en snake_case; las colecciones lo fijan explícitamente
    @declared_attr.directive
    def __tablename__(cls) -> str:
        return re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()


def new_id() -> str:
    """Identificador opaco para documentos nuevos."""
    return str(uuid.uuid4())

import logging

from app.core.logging_config import setup_logging
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)


def create_tables():
    """Crear todas las tablas de las colecciones si no existen"""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Tablas creadas exitosamente: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    setup_logging()
    create_tables()

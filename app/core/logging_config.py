import logging
import sys
import os
from datetime import datetime
from app.core.config import get_settings


def setup_logging(log_dir: str = "logs"):
    """Configura el logging de la consola de administración, respetando DEBUG_MODE."""
    settings = get_settings()
    root = logging.getLogger()
    level = logging.DEBUG if settings.DEBUG_MODE else logging.INFO
    root.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)-20s | %(filename)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    # Un archivo por día bajo logs/
    os.makedirs(log_dir, exist_ok=True)
    file_handler = logging.FileHandler(os.path.join(log_dir, f"app_{datetime.now().strftime('%Y%m%d')}.log"))
    file_handler.setLevel(level)
    handlers.append(file_handler)

    # Limpiar handlers existentes si Uvicorn/otro añadió alguno antes
    if root.hasHandlers():
        root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # SQLAlchemy es muy ruidoso en DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)

    root.info("Configuración de logging aplicada. Nivel %s.", logging.getLevelName(level))

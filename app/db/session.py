from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import SQLAlchemyError
from contextlib import contextmanager
import logging

from app.core.config import get_settings
from app.core.errors import classify_backend_error

logger = logging.getLogger(__name__)

settings_instance = get_settings()
db_url = str(settings_instance.SQLALCHEMY_DATABASE_URI)


def _display_url(url: str) -> str:
    """Oculta credenciales antes de loguear la URL."""
    if '@' in url:
        scheme = url.split('://')[0]
        return f"{scheme}://***@{url.split('@', 1)[1]}"
    return url


def build_engine(url: str) -> Engine:
    """
    Crea el engine de SQLAlchemy según el backend.

    SQLite (desarrollo y tests) usa un único hilo compartido; PostgreSQL usa
    pool de conexiones con timeout de sentencia explícito.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=180,
        connect_args={
            "connect_timeout": 10,
            "options": "-c statement_timeout=30000",
        },
    )


engine = build_engine(db_url)
logger.info(f"Engine creado para: {_display_url(db_url)}")

# Crear clase de sesión
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependencia para obtener la sesión de DB
def get_db():
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de SQLAlchemy en la sesión: {e}", exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Agrupa varias escrituras en una sola transacción.

    Confirma al salir sin errores; ante cualquier excepción hace rollback y
    relanza (los errores de SQLAlchemy se traducen a la taxonomía de la consola).
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise classify_backend_error(e) from e
    except Exception:
        db.rollback()
        raise

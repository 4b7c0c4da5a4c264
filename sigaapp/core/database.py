"""
Base de datos local (SQLite) donde se guarda la sesión y las preferencias
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from sigaapp.core.config import settings

Base = declarative_base()


def _engine_for(url: str):
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # Una sola conexión para que la BD en memoria sobreviva entre sesiones
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url)


engine = _engine_for(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    """Crea las tablas locales si no existen"""
    from sigaapp import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def create_session_factory(url: str) -> sessionmaker:
    """Motor + tablas + fábrica de sesiones para una URL concreta (tests, perfiles)"""
    other_engine = _engine_for(url)
    init_db(other_engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=other_engine)

"""
Modelo Preference - almacén clave/valor local (sesión, permisos, ajustes)
"""
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from sigaapp.core.database import Base


class Preference(Base):
    __tablename__ = "preferences"

    key = Column(String(100), primary_key=True)

    # Valor serializado como JSON (str, int, bool o lista)
    value = Column(Text, nullable=True)

    # Timestamps
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

"""
Exportar todos los modelos
"""
from sigaapp.models.preference import Preference

__all__ = [
    "Preference",
]

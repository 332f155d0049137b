"""
Models package.
Import all models here so they are automatically registered with SQLModel.metadata
"""

from models.tables import (
    CodigoRegistro,
    Estudio,
    EstudioPatologia,
    ImagenEstudio,
    Paciente,
    Patologia,
    Usuario,
)

__all__ = [
    "Usuario",
    "CodigoRegistro",
    "Paciente",
    "Patologia",
    "Estudio",
    "ImagenEstudio",
    "EstudioPatologia",
]

"""
Types module for API request/response models
"""

from app_types.estudios import (
    ActualizacionEstudio,
    DatosEstudio,
    DatosHallazgo,
    DatosPaciente,
    EstudioCreado,
    EstudioDetalle,
    EstudioListado,
    FiltrosEstudio,
    Genero,
    GradoSeveridad,
    Lado,
    PatologiaSugerencia,
    Perspectiva,
    VasoEvaluado,
)
from app_types.monitoring import HealthStatus
from app_types.usuarios import (
    ActualizacionPerfil,
    ActualizacionUsuario,
    Principal,
    RegistroUsuario,
    Rol,
    Token,
    UsuarioRespuesta,
)

__all__ = [
    # Study types
    "Genero",
    "Perspectiva",
    "VasoEvaluado",
    "Lado",
    "GradoSeveridad",
    "DatosPaciente",
    "DatosEstudio",
    "DatosHallazgo",
    "ActualizacionEstudio",
    "FiltrosEstudio",
    "EstudioCreado",
    "EstudioListado",
    "EstudioDetalle",
    "PatologiaSugerencia",
    # User types
    "Rol",
    "Principal",
    "RegistroUsuario",
    "ActualizacionPerfil",
    "ActualizacionUsuario",
    "UsuarioRespuesta",
    "Token",
    # Monitoring types
    "HealthStatus",
]

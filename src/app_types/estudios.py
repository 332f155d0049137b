"""
Pydantic types for study ingestion, filtering and lifecycle
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class Genero(str, Enum):
    MASCULINO = "MASCULINO"
    FEMENINO = "FEMENINO"
    OTRO = "OTRO"


class Perspectiva(str, Enum):
    """
    Ventana acústica utilizada en el estudio
    """

    TRANSTEMPORAL = "TRANSTEMPORAL"
    TRANSORBITARIO = "TRANSORBITARIO"
    TRANSFORAMINAL = "TRANSFORAMINAL"


class VasoEvaluado(str, Enum):
    ACM = "ACM"
    ACA = "ACA"
    ACP = "ACP"
    BASILAR = "BASILAR"
    VERTEBRAL = "VERTEBRAL"
    OTRO = "OTRO"


class Lado(str, Enum):
    DERECHO = "DERECHO"
    IZQUIERDO = "IZQUIERDO"
    BILATERAL = "BILATERAL"


class GradoSeveridad(str, Enum):
    LEVE = "LEVE"
    MODERADO = "MODERADO"
    SEVERO = "SEVERO"
    CRITICO = "CRITICO"


def _vacio_a_none(valor: Any) -> Any:
    """Los formularios envían cadenas vacías para campos no seleccionados"""
    if isinstance(valor, str) and valor.strip() == "":
        return None
    return valor


class DatosPaciente(BaseModel):
    """
    Datos del paciente capturados en la subida del estudio
    """

    edad: int = Field(..., ge=0, le=120, description="Edad del paciente")
    genero: Genero
    notas_generales: Optional[str] = None

    @field_validator("notas_generales", mode="before")
    @classmethod
    def normalizar_vacios(cls, valor: Any) -> Any:
        return _vacio_a_none(valor)


class DatosEstudio(BaseModel):
    """
    Atributos descriptivos del estudio Doppler
    """

    perspectiva: Perspectiva
    vaso_evaluado: VasoEvaluado
    lado: Lado


class DatosHallazgo(BaseModel):
    """
    Hallazgo diagnóstico: patología seleccionada o escrita, severidad y nota

    `id_patologia` llega cuando el usuario eligió una sugerencia del
    autocompletado; si no, se usa `nombre_patologia`.
    """

    id_patologia: Optional[int] = None
    nombre_patologia: Optional[str] = None
    grado_severidad: GradoSeveridad
    nota_especifica: Optional[str] = None

    @field_validator(
        "id_patologia", "nombre_patologia", "nota_especifica", mode="before"
    )
    @classmethod
    def normalizar_vacios(cls, valor: Any) -> Any:
        return _vacio_a_none(valor)


class ActualizacionEstudio(BaseModel):
    perspectiva: Perspectiva
    vaso_evaluado: VasoEvaluado
    lado: Lado


class FiltrosEstudio(BaseModel):
    """
    Configuración de filtros para el listado de estudios

    Todos los campos son opcionales. Los filtros categóricos aceptan el
    centinela "TODOS" (o "ALL") para no filtrar.
    """

    q: Optional[str] = Field(default=None, description="Palabra clave")
    edad_min: Optional[int] = None
    edad_max: Optional[int] = None
    vaso_evaluado: Optional[str] = None
    lado: Optional[str] = None
    genero: Optional[str] = None
    perspectiva: Optional[str] = None

    @field_validator(
        "edad_min",
        "edad_max",
        "vaso_evaluado",
        "lado",
        "genero",
        "perspectiva",
        mode="before",
    )
    @classmethod
    def normalizar_vacios(cls, valor: Any) -> Any:
        return _vacio_a_none(valor)


class EstudioCreado(BaseModel):
    id_estudio: int


class EstudioListado(BaseModel):
    """
    Fila del listado de estudios (estudio + paciente + hallazgo + patología)
    """

    id_estudio: int
    fecha_estudio: datetime
    perspectiva: str
    vaso_evaluado: str
    lado: str
    archivo_ruta: str
    edad: int
    genero: str
    nombre_patologia: Optional[str] = None
    grado_severidad: Optional[str] = None


class EstudioDetalle(EstudioListado):
    id_paciente: int
    notas_generales: Optional[str] = None
    nota_especifica: Optional[str] = None
    archivo_disponible: Optional[bool] = Field(
        default=None, description="Si el archivo del estudio sigue en el almacén"
    )


class PatologiaSugerencia(BaseModel):
    id_patologia: int
    nombre_patologia: str

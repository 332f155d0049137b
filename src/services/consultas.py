"""
Construcción de consultas filtradas sobre estudios

Traduce una configuración de filtros opcionales en un plan de consulta
parametrizado (predicado, parámetros, orden). El texto SQL solo contiene
fragmentos constantes y marcadores de parámetros con nombre; los valores
del usuario viajan exclusivamente en el diccionario de parámetros.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy import DateTime
from sqlmodel import Session, text

from app_types.estudios import EstudioDetalle, EstudioListado, FiltrosEstudio
from services.errores import ErrorValidacion, NoEncontrado
from services.transacciones import describir_validacion
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Valores que en un filtro categórico significan "sin filtrar"
CENTINELAS = frozenset({"TODOS", "ALL"})

# Filtros de coincidencia exacta: campo del filtro -> columna
FILTROS_EXACTOS = (
    ("vaso_evaluado", "e.vaso_evaluado"),
    ("lado", "e.lado"),
    ("genero", "p.genero"),
    ("perspectiva", "e.perspectiva"),
)

# Columnas donde busca la palabra clave (OR entre ellas)
COLUMNAS_PALABRA_CLAVE = (
    "pat.nombre_patologia",
    "e.vaso_evaluado",
    "e.perspectiva",
)

SQL_ESTUDIOS = """
    SELECT
        e.id_estudio, e.fecha_estudio, e.perspectiva, e.vaso_evaluado, e.lado, e.archivo_ruta,
        p.edad, p.genero,
        pat.nombre_patologia, ep.grado_severidad
    FROM estudios e
    JOIN pacientes p ON e.id_paciente = p.id_paciente
    LEFT JOIN estudios_patologias ep ON e.id_estudio = ep.id_estudio
    LEFT JOIN patologias pat ON ep.id_patologia = pat.id_patologia
"""

SQL_DETALLE_ESTUDIO = """
    SELECT
        e.id_estudio, e.id_paciente, e.fecha_estudio, e.perspectiva, e.vaso_evaluado,
        e.lado, e.archivo_ruta,
        p.edad, p.genero, p.notas_generales,
        pat.nombre_patologia, ep.grado_severidad, ep.nota_especifica
    FROM estudios e
    JOIN pacientes p ON e.id_paciente = p.id_paciente
    LEFT JOIN estudios_patologias ep ON e.id_estudio = ep.id_estudio
    LEFT JOIN patologias pat ON ep.id_patologia = pat.id_patologia
    WHERE e.id_estudio = :id_estudio
"""

ORDEN_ESTUDIOS = "e.fecha_estudio DESC, e.id_estudio DESC"


@dataclass(frozen=True)
class ConsultaEstudios:
    """
    Plan de consulta: predicado SQL con marcadores, parámetros y orden
    """

    predicado: str
    parametros: Dict[str, Any] = field(default_factory=dict)
    orden: str = ORDEN_ESTUDIOS

    def sql(self) -> str:
        return f"{SQL_ESTUDIOS} WHERE {self.predicado} ORDER BY {self.orden}"


def patron_contiene(valor: str) -> str:
    """
    Patrón LIKE de subcadena, en mayúsculas y con comodines escapados

    Las columnas buscadas guardan valores en mayúsculas (nombres de patología
    normalizados y dominios enumerados), así que la palabra clave se lleva a
    mayúsculas en Python, incluidas las letras acentuadas. Los caracteres %
    y _ escritos por el usuario se buscan literalmente.
    """
    escapado = (
        valor.upper()
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escapado}%"


def condicion_contiene(columna: str, parametro: str) -> str:
    return f"{columna} LIKE :{parametro} ESCAPE '\\'"


def _validar_filtros(
    filtros: Optional[Union[FiltrosEstudio, Mapping[str, Any]]],
) -> FiltrosEstudio:
    if filtros is None:
        return FiltrosEstudio()
    try:
        return FiltrosEstudio.model_validate(filtros)
    except ValidationError as e:
        raise ErrorValidacion(describir_validacion(e)) from e


def _filtro_activo(valor: Optional[str]) -> bool:
    return bool(valor) and valor.strip() not in CENTINELAS


def construir_consulta_estudios(
    filtros: Optional[Union[FiltrosEstudio, Mapping[str, Any]]] = None,
) -> ConsultaEstudios:
    """
    Construir el plan de consulta para el listado de estudios

    Cada filtro presente se aplica de forma independiente y todos se combinan
    con AND. Sin filtros el predicado acepta todos los estudios.

    Args:
        filtros: FiltrosEstudio o diccionario con q, edad_min, edad_max,
            vaso_evaluado, lado, genero, perspectiva (todos opcionales)

    Returns:
        ConsultaEstudios con predicado, parámetros y orden por fecha descendente

    Raises:
        ErrorValidacion: Si las edades no son enteros
    """
    filtros = _validar_filtros(filtros)
    condiciones: List[str] = []
    parametros: Dict[str, Any] = {}

    palabra_clave = (filtros.q or "").strip()
    if palabra_clave:
        alternativas = " OR ".join(
            condicion_contiene(columna, "q") for columna in COLUMNAS_PALABRA_CLAVE
        )
        condiciones.append(f"({alternativas})")
        parametros["q"] = patron_contiene(palabra_clave)

    # Rango de edad inclusivo
    if filtros.edad_min is not None:
        condiciones.append("p.edad >= :edad_min")
        parametros["edad_min"] = filtros.edad_min
    if filtros.edad_max is not None:
        condiciones.append("p.edad <= :edad_max")
        parametros["edad_max"] = filtros.edad_max

    for campo, columna in FILTROS_EXACTOS:
        valor = getattr(filtros, campo)
        if _filtro_activo(valor):
            condiciones.append(f"{columna} = :{campo}")
            parametros[campo] = valor.strip()

    predicado = " AND ".join(condiciones) if condiciones else "1=1"
    return ConsultaEstudios(predicado=predicado, parametros=parametros)


def listar_estudios(
    session: Session,
    filtros: Optional[Union[FiltrosEstudio, Mapping[str, Any]]] = None,
) -> List[EstudioListado]:
    """
    Listar estudios con paciente, hallazgo y patología aplicando filtros

    Args:
        session: Sesión de base de datos
        filtros: Configuración de filtros opcionales

    Returns:
        Lista de EstudioListado ordenada del más reciente al más antiguo
    """
    consulta = construir_consulta_estudios(filtros)
    query = text(consulta.sql()).columns(fecha_estudio=DateTime)
    result = session.execute(query, consulta.parametros)
    estudios = [EstudioListado(**row._mapping) for row in result.fetchall()]
    logger.debug(f"Listado de estudios: {len(estudios)} resultados")
    return estudios


def obtener_estudio(session: Session, id_estudio: int) -> EstudioDetalle:
    """Detalle de un estudio con datos del paciente y del hallazgo"""
    query = text(SQL_DETALLE_ESTUDIO).columns(fecha_estudio=DateTime)
    row = session.execute(query, {"id_estudio": id_estudio}).first()
    if row is None:
        raise NoEncontrado(f"Estudio {id_estudio} no encontrado.")
    return EstudioDetalle(**row._mapping)

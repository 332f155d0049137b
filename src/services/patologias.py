"""
Resolución y búsqueda de patologías

Las patologías se comparten entre hallazgos y se guardan con el nombre
normalizado. La creación es segura ante concurrencia: la restricción UNIQUE
decide el ganador y el perdedor relee la fila superviviente.
"""

from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, text

from app_types.estudios import PatologiaSugerencia
from models.tables import Patologia
from services.consultas import condicion_contiene, patron_contiene
from services.errores import ErrorValidacion
from utils.logging_config import get_logger

logger = get_logger(__name__)

LIMITE_SUGERENCIAS = 10


def normalizar_nombre(nombre: str) -> str:
    """Mayúsculas y sin espacios en los extremos"""
    return nombre.strip().upper()


def _buscar_por_nombre(session: Session, nombre: str) -> Optional[int]:
    statement = select(Patologia.id_patologia).where(
        Patologia.nombre_patologia == nombre
    )
    return session.exec(statement).first()


def resolver_o_crear_patologia(
    session: Session, nombre_o_id: Union[int, str, None]
) -> int:
    """
    Obtener el identificador de una patología, creándola si no existe

    Un identificador explícito (elegido en el autocompletado) se usa tal cual.
    Un nombre se normaliza y se busca; si no existe se inserta dentro de un
    SAVEPOINT y, si otra transacción lo insertó primero, se relee el existente.

    Args:
        session: Sesión de base de datos (dentro de la transacción del llamador)
        nombre_o_id: Identificador entero o nombre libre de la patología

    Returns:
        id_patologia

    Raises:
        ErrorValidacion: Si el nombre está vacío
    """
    if isinstance(nombre_o_id, int) and not isinstance(nombre_o_id, bool):
        return nombre_o_id

    nombre = normalizar_nombre(nombre_o_id or "")
    if not nombre:
        raise ErrorValidacion("El nombre de la patología no puede estar vacío.")

    existente = _buscar_por_nombre(session, nombre)
    if existente is not None:
        return existente

    try:
        with session.begin_nested():
            patologia = Patologia(nombre_patologia=nombre)
            session.add(patologia)
            session.flush()
    except IntegrityError:
        # Otra transacción creó el mismo nombre entre la búsqueda y la inserción
        logger.info(f"Patología '{nombre}' creada concurrentemente, se reutiliza")
        existente = _buscar_por_nombre(session, nombre)
        if existente is None:
            raise
        return existente

    logger.info(f"Nueva patología registrada: {nombre} (id {patologia.id_patologia})")
    return patologia.id_patologia


def buscar_patologias(
    session: Session, texto: Optional[str], limite: int = LIMITE_SUGERENCIAS
) -> List[PatologiaSugerencia]:
    """
    Sugerencias de patologías para el autocompletado

    Una entrada vacía devuelve una lista vacía sin consultar la base de datos.
    """
    palabra_clave = (texto or "").strip()
    if not palabra_clave:
        return []

    query = text(
        "SELECT id_patologia, nombre_patologia FROM patologias "
        f"WHERE {condicion_contiene('nombre_patologia', 'q')} "
        "ORDER BY nombre_patologia LIMIT :limite"
    )
    result = session.execute(
        query, {"q": patron_contiene(palabra_clave), "limite": limite}
    )
    return [PatologiaSugerencia(**row._mapping) for row in result.fetchall()]

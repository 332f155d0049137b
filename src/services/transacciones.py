"""
Unidades de trabajo y acciones compensatorias

Traduce los errores de SQLAlchemy a errores del catálogo en el límite de la
transacción y permite asociar limpiezas al camino de fallo.
"""

from contextlib import contextmanager
from typing import Callable, Iterator

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from services.errores import (
    ErrorAlmacenamiento,
    ErrorCatalogo,
    ErrorConflicto,
    ErrorValidacion,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)


def describir_validacion(error: ValidationError) -> str:
    """Resumir los errores de pydantic en un mensaje legible"""
    partes = []
    for detalle in error.errors():
        campo = ".".join(str(p) for p in detalle["loc"]) or "entrada"
        partes.append(f"{campo}: {detalle['msg']}")
    return "; ".join(partes)


@contextmanager
def unidad_de_trabajo(
    session: Session,
    mensaje_conflicto: str = "El registro entra en conflicto con uno existente.",
) -> Iterator[Session]:
    """
    Ejecutar un bloque como una única transacción todo-o-nada

    Confirma al salir sin errores. Ante cualquier error revierte la
    transacción completa antes de propagarlo, traducido a la taxonomía
    del catálogo.
    """
    try:
        yield session
        session.commit()
    except ErrorCatalogo:
        session.rollback()
        raise
    except ValidationError as e:
        session.rollback()
        raise ErrorValidacion(describir_validacion(e)) from e
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Violación de restricción: {e.orig}")
        raise ErrorConflicto(mensaje_conflicto) from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error de base de datos, transacción revertida: {e}")
        raise ErrorAlmacenamiento("Error de base de datos.") from e
    except BaseException:
        session.rollback()
        raise


@contextmanager
def compensar_si_falla(accion: Callable[[], None], descripcion: str) -> Iterator[None]:
    """
    Ejecutar `accion` si el bloque falla, y luego propagar el error original

    Los fallos de la propia compensación se registran y no se relanzan.
    """
    try:
        yield
    except BaseException:
        try:
            accion()
        except Exception as e:
            logger.error(f"No se pudo compensar ({descripcion}): {e}")
        raise

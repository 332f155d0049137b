"""
Edición y eliminación de estudios
"""

from typing import Any, Mapping, Union

from pydantic import ValidationError
from sqlmodel import Session

from app_types.estudios import ActualizacionEstudio
from models.tables import Estudio
from services.almacenamiento import AlmacenamientoArchivos
from services.errores import ErrorValidacion, NoEncontrado
from services.transacciones import describir_validacion, unidad_de_trabajo
from utils.logging_config import get_logger

logger = get_logger(__name__)


def actualizar_atributos_estudio(
    session: Session,
    id_estudio: int,
    cambios: Union[ActualizacionEstudio, Mapping[str, Any]],
) -> None:
    """
    Sobrescribir perspectiva, vaso evaluado y lado de un estudio

    Los valores se validan contra sus dominios enumerados.

    Raises:
        ErrorValidacion: Si algún valor está fuera de su dominio
        NoEncontrado: Si el estudio no existe
    """
    try:
        datos = ActualizacionEstudio.model_validate(cambios)
    except ValidationError as e:
        raise ErrorValidacion(describir_validacion(e)) from e

    with unidad_de_trabajo(session):
        estudio = session.get(Estudio, id_estudio)
        if estudio is None:
            raise NoEncontrado(f"Estudio {id_estudio} no encontrado.")
        for key, value in datos.model_dump(mode="json").items():
            setattr(estudio, key, value)
        session.add(estudio)

    logger.info(f"Estudio {id_estudio} actualizado")


def eliminar_estudio(
    session: Session, almacenamiento: AlmacenamientoArchivos, id_estudio: int
) -> None:
    """
    Eliminar un estudio y, tras confirmar, su archivo físico

    La fila del estudio (con su referencia de imagen y su hallazgo) se elimina
    en una transacción. Solo después de confirmarla se borra el archivo; si el
    archivo ya no existe no es un error y cualquier otro fallo del sistema de
    archivos se registra como advertencia sin afectar la eliminación.

    Raises:
        NoEncontrado: Si el estudio no existe
    """
    with unidad_de_trabajo(session):
        estudio = session.get(Estudio, id_estudio)
        if estudio is None:
            raise NoEncontrado(f"Estudio {id_estudio} no encontrado.")
        archivo_ruta = estudio.archivo_ruta
        session.delete(estudio)

    logger.info(f"Estudio {id_estudio} eliminado")

    try:
        almacenamiento.eliminar(archivo_ruta)
    except FileNotFoundError:
        logger.info(f"El archivo del estudio {id_estudio} ya no existía: {archivo_ruta}")
    except OSError as e:
        logger.warning(
            f"Advertencia: no se pudo eliminar el archivo físico {archivo_ruta}: {e}"
        )

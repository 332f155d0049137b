"""
Servicio de ingesta de estudios

Crea en una sola transacción el paciente, la patología (resuelta o nueva),
el estudio, su referencia de imagen y su hallazgo. Si algo falla, la
transacción se revierte completa y el archivo ya subido se elimina.
"""

from typing import Any, Mapping, Optional, Union

from sqlmodel import Session

from app_types.estudios import DatosEstudio, DatosHallazgo, DatosPaciente
from models.tables import Estudio, EstudioPatologia, ImagenEstudio, Paciente
from services.almacenamiento import AlmacenamientoArchivos
from services.errores import ErrorValidacion
from services.patologias import resolver_o_crear_patologia
from services.transacciones import compensar_si_falla, unidad_de_trabajo
from utils.logging_config import get_logger

logger = get_logger(__name__)


def ingestar_estudio(
    session: Session,
    almacenamiento: AlmacenamientoArchivos,
    paciente: Union[DatosPaciente, Mapping[str, Any]],
    estudio: Union[DatosEstudio, Mapping[str, Any]],
    hallazgo: Union[DatosHallazgo, Mapping[str, Any]],
    ruta_archivo: Optional[str],
) -> int:
    """
    Registrar un estudio completo a partir de una subida

    Pasos dentro de una única unidad de trabajo:
    1. Insertar el paciente
    2. Resolver o crear la patología
    3. Insertar el estudio con la ruta del archivo
    4. Insertar la referencia de imagen del estudio
    5. Insertar el hallazgo (patología, severidad, nota)
    6. Confirmar

    Args:
        session: Sesión de base de datos
        almacenamiento: Almacén donde ya se escribió el archivo subido
        paciente: Edad, género y notas generales
        estudio: Perspectiva, vaso evaluado y lado
        hallazgo: id o nombre de patología, severidad y nota específica
        ruta_archivo: Ruta estable del archivo ya almacenado

    Returns:
        id_estudio del estudio creado

    Raises:
        ErrorValidacion: Sin archivo, datos fuera de dominio o patología vacía
        ErrorConflicto: Violación de una restricción de unicidad o clave foránea
        ErrorAlmacenamiento: Fallo de la base de datos
    """
    if not ruta_archivo:
        raise ErrorValidacion("No se adjuntó ningún archivo.")

    with compensar_si_falla(
        lambda: almacenamiento.eliminar(ruta_archivo),
        f"eliminar archivo huérfano {ruta_archivo}",
    ):
        with unidad_de_trabajo(session):
            datos_paciente = DatosPaciente.model_validate(paciente)
            datos_estudio = DatosEstudio.model_validate(estudio)
            datos_hallazgo = DatosHallazgo.model_validate(hallazgo)

            nuevo_paciente = Paciente(**datos_paciente.model_dump(mode="json"))
            session.add(nuevo_paciente)
            session.flush()
            id_paciente = nuevo_paciente.id_paciente

            id_patologia = resolver_o_crear_patologia(
                session,
                datos_hallazgo.id_patologia
                if datos_hallazgo.id_patologia is not None
                else datos_hallazgo.nombre_patologia,
            )

            nuevo_estudio = Estudio(
                id_paciente=id_paciente,
                archivo_ruta=ruta_archivo,
                **datos_estudio.model_dump(mode="json"),
            )
            session.add(nuevo_estudio)
            session.flush()
            id_estudio = nuevo_estudio.id_estudio

            session.add(ImagenEstudio(id_estudio=id_estudio, ruta_archivo=ruta_archivo))
            session.add(
                EstudioPatologia(
                    id_estudio=id_estudio,
                    id_patologia=id_patologia,
                    grado_severidad=datos_hallazgo.grado_severidad.value,
                    nota_especifica=datos_hallazgo.nota_especifica,
                )
            )
            session.flush()

    logger.info(
        f"Estudio {id_estudio} ingresado (paciente {id_paciente}, "
        f"patología {id_patologia})"
    )
    return id_estudio

"""
Rutas para gestión de estudios Doppler transcraneal

Este módulo contiene los endpoints para:
- Listado de estudios con filtros de búsqueda
- Subida de un estudio (archivo + paciente + hallazgo)
- Detalle, edición y eliminación de estudios
- Autocompletado de patologías
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Response, UploadFile, status
from sqlmodel import Session

from app_types.estudios import (
    EstudioCreado,
    EstudioDetalle,
    EstudioListado,
    PatologiaSugerencia,
)
from app_types.usuarios import Principal
from routes.dependencias import get_almacenamiento, requiere
from services.acceso import Capacidad
from services.almacenamiento import AlmacenamientoArchivos
from services.ciclo_vida import actualizar_atributos_estudio, eliminar_estudio
from services.consultas import listar_estudios, obtener_estudio
from services.ingesta import ingestar_estudio
from services.patologias import buscar_patologias
from utils.logging_config import get_logger
from utils.settings import get_session

logger = get_logger(__name__)

router = APIRouter(prefix="/estudios", tags=["estudios"])
router_patologias = APIRouter(prefix="/api", tags=["patologias"])


def _detalle_con_archivo(
    session: Session, almacenamiento: AlmacenamientoArchivos, id_estudio: int
) -> EstudioDetalle:
    estudio = obtener_estudio(session, id_estudio)
    estudio.archivo_disponible = almacenamiento.existe(estudio.archivo_ruta)
    return estudio


@router.get("", response_model=List[EstudioListado])
def listar(
    q: Optional[str] = None,
    edad_min: Optional[str] = None,
    edad_max: Optional[str] = None,
    vaso_evaluado: Optional[str] = None,
    lado: Optional[str] = None,
    genero: Optional[str] = None,
    perspectiva: Optional[str] = None,
    session: Session = Depends(get_session),
    principal: Principal = Depends(requiere(Capacidad.LISTAR_ESTUDIOS)),
) -> List[EstudioListado]:
    """
    Listar estudios con filtros opcionales

    Filtros: palabra clave (patología, vaso o perspectiva), rango de edad
    inclusivo y coincidencia exacta de vaso, lado, género y perspectiva.
    "TODOS" desactiva un filtro categórico. Orden: más reciente primero.
    """
    filtros = {
        "q": q,
        "edad_min": edad_min,
        "edad_max": edad_max,
        "vaso_evaluado": vaso_evaluado,
        "lado": lado,
        "genero": genero,
        "perspectiva": perspectiva,
    }
    return listar_estudios(session, filtros)


@router.post("", response_model=EstudioCreado, status_code=status.HTTP_201_CREATED)
def subir_estudio(
    imagen_estudio: Optional[UploadFile] = File(None),
    edad: Optional[str] = Form(None),
    genero: Optional[str] = Form(None),
    notas_generales: Optional[str] = Form(None),
    perspectiva: Optional[str] = Form(None),
    vaso_evaluado: Optional[str] = Form(None),
    lado: Optional[str] = Form(None),
    id_patologia: Optional[str] = Form(None),
    nombre_patologia: Optional[str] = Form(None),
    grado_severidad: Optional[str] = Form(None),
    nota_especifica: Optional[str] = Form(None),
    session: Session = Depends(get_session),
    almacenamiento: AlmacenamientoArchivos = Depends(get_almacenamiento),
    principal: Principal = Depends(requiere(Capacidad.SUBIR_ESTUDIO)),
) -> EstudioCreado:
    """
    Subir un estudio con su archivo de ultrasonido

    El archivo se guarda primero; luego se registran paciente, patología,
    estudio, referencia de imagen y hallazgo en una sola transacción. Si el
    registro falla, el archivo guardado se elimina.
    """
    ruta_archivo = None
    if imagen_estudio is not None and imagen_estudio.filename:
        try:
            ruta_archivo = almacenamiento.guardar(
                imagen_estudio.filename, imagen_estudio.file
            )
        finally:
            imagen_estudio.file.close()

    id_estudio = ingestar_estudio(
        session,
        almacenamiento,
        paciente={"edad": edad, "genero": genero, "notas_generales": notas_generales},
        estudio={
            "perspectiva": perspectiva,
            "vaso_evaluado": vaso_evaluado,
            "lado": lado,
        },
        hallazgo={
            "id_patologia": id_patologia,
            "nombre_patologia": nombre_patologia,
            "grado_severidad": grado_severidad,
            "nota_especifica": nota_especifica,
        },
        ruta_archivo=ruta_archivo,
    )
    logger.info(f"Usuario {principal.id_usuario} subió el estudio {id_estudio}")
    return EstudioCreado(id_estudio=id_estudio)


@router.get("/{id_estudio}", response_model=EstudioDetalle)
def detalle(
    id_estudio: int,
    session: Session = Depends(get_session),
    almacenamiento: AlmacenamientoArchivos = Depends(get_almacenamiento),
    principal: Principal = Depends(requiere(Capacidad.VER_ESTUDIO)),
) -> EstudioDetalle:
    """Detalle de un estudio con paciente, patología, severidad y estado del archivo"""
    return _detalle_con_archivo(session, almacenamiento, id_estudio)


@router.put("/{id_estudio}", response_model=EstudioDetalle)
def editar(
    id_estudio: int,
    cambios: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
    almacenamiento: AlmacenamientoArchivos = Depends(get_almacenamiento),
    principal: Principal = Depends(requiere(Capacidad.EDITAR_ESTUDIO)),
) -> EstudioDetalle:
    """Editar perspectiva, vaso evaluado y lado de un estudio"""
    actualizar_atributos_estudio(session, id_estudio, cambios)
    return _detalle_con_archivo(session, almacenamiento, id_estudio)


@router.delete("/{id_estudio}", status_code=status.HTTP_204_NO_CONTENT)
def eliminar(
    id_estudio: int,
    session: Session = Depends(get_session),
    almacenamiento: AlmacenamientoArchivos = Depends(get_almacenamiento),
    principal: Principal = Depends(requiere(Capacidad.ELIMINAR_ESTUDIO)),
) -> Response:
    """Eliminar un estudio y su archivo físico"""
    eliminar_estudio(session, almacenamiento, id_estudio)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router_patologias.get("/patologias", response_model=List[PatologiaSugerencia])
def autocompletar_patologias(
    q: Optional[str] = None,
    session: Session = Depends(get_session),
    principal: Principal = Depends(requiere(Capacidad.BUSCAR_PATOLOGIAS)),
) -> List[PatologiaSugerencia]:
    """Sugerencias de patologías (máximo 10) para el formulario de subida"""
    return buscar_patologias(session, q)

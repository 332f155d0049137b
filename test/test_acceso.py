import pytest

from app_types.usuarios import Principal, Rol
from services.acceso import (
    PERMISOS,
    Capacidad,
    autorizar,
    requerir_autenticacion,
    verificar_no_es_propia_cuenta,
)
from services.errores import AccesoDenegado

ADMIN = Principal(id_usuario=1, rol=Rol.ADMIN, nombre="admin")
INVESTIGADOR = Principal(id_usuario=2, rol=Rol.INVESTIGADOR, nombre="inv")
ASISTENTE = Principal(id_usuario=3, rol=Rol.ASISTENTE, nombre="asis")


def test_todas_las_capacidades_tienen_permisos():
    assert set(PERMISOS) == set(Capacidad)


@pytest.mark.parametrize("capacidad", list(Capacidad))
def test_admin_puede_todo(capacidad):
    assert autorizar(ADMIN, capacidad) is ADMIN


@pytest.mark.parametrize(
    "principal,capacidad,permitido",
    [
        (ASISTENTE, Capacidad.LISTAR_ESTUDIOS, True),
        (ASISTENTE, Capacidad.VER_ESTUDIO, True),
        (ASISTENTE, Capacidad.BUSCAR_PATOLOGIAS, True),
        (ASISTENTE, Capacidad.EDITAR_PERFIL, True),
        (ASISTENTE, Capacidad.SUBIR_ESTUDIO, False),
        (ASISTENTE, Capacidad.EDITAR_ESTUDIO, False),
        (ASISTENTE, Capacidad.ELIMINAR_ESTUDIO, False),
        (ASISTENTE, Capacidad.GESTIONAR_USUARIOS, False),
        (INVESTIGADOR, Capacidad.SUBIR_ESTUDIO, True),
        (INVESTIGADOR, Capacidad.EDITAR_ESTUDIO, True),
        (INVESTIGADOR, Capacidad.ELIMINAR_ESTUDIO, False),
        (INVESTIGADOR, Capacidad.GESTIONAR_USUARIOS, False),
    ],
)
def test_permisos_por_rol(principal, capacidad, permitido):
    if permitido:
        assert autorizar(principal, capacidad) is principal
    else:
        with pytest.raises(AccesoDenegado):
            autorizar(principal, capacidad)


@pytest.mark.parametrize("capacidad", list(Capacidad))
def test_sin_sesion_se_deniega(capacidad):
    with pytest.raises(AccesoDenegado):
        autorizar(None, capacidad)


def test_requerir_autenticacion():
    assert requerir_autenticacion(ASISTENTE) is ASISTENTE
    with pytest.raises(AccesoDenegado):
        requerir_autenticacion(None)


def test_denegacion_tiene_codigo_403():
    with pytest.raises(AccesoDenegado) as exc_info:
        autorizar(ASISTENTE, Capacidad.ELIMINAR_ESTUDIO)
    assert exc_info.value.status_code == 403


def test_no_puede_eliminar_propia_cuenta():
    with pytest.raises(AccesoDenegado):
        verificar_no_es_propia_cuenta(ADMIN, ADMIN.id_usuario)
    verificar_no_es_propia_cuenta(ADMIN, 99)

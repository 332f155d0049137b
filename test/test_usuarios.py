import pytest
from sqlmodel import select

from app_types.usuarios import Principal, Rol
from models.tables import CodigoRegistro, Usuario
from services.errores import AccesoDenegado, ErrorConflicto, ErrorValidacion, NoEncontrado
from services.usuarios import (
    actualizar_perfil,
    actualizar_usuario,
    autenticar,
    eliminar_usuario,
    listar_usuarios,
    registrar_usuario,
)


def _datos(nombre="ana", email="ana@hospital.org", codigo="INV-001"):
    return {"nombre": nombre, "email": email, "contrasena": "secreta", "codigo": codigo}


@pytest.fixture
def codigos(session):
    session.add(CodigoRegistro(codigo="INV-001", tipo_usuario="INVESTIGADOR"))
    session.add(CodigoRegistro(codigo="ADM-001", tipo_usuario="ADMIN"))
    session.add(CodigoRegistro(codigo="ASI-001", tipo_usuario="ASISTENTE"))
    session.commit()


def test_registro_toma_el_rol_del_codigo(session, codigos):
    usuario = registrar_usuario(session, _datos())

    assert usuario.rol == Rol.INVESTIGADOR
    guardado = session.get(Usuario, usuario.id)
    assert guardado.contrasena != "secreta"

    codigo = session.get(CodigoRegistro, "INV-001")
    session.refresh(codigo)
    assert codigo.usado is True
    assert codigo.fecha_uso is not None


def test_codigo_de_un_solo_uso(session, codigos):
    registrar_usuario(session, _datos())
    with pytest.raises(ErrorValidacion):
        registrar_usuario(session, _datos(nombre="beto", email="beto@hospital.org"))
    assert len(session.exec(select(Usuario)).all()) == 1


def test_codigo_reutilizable(session, codigos):
    registrar_usuario(session, _datos(), codigos_reutilizables=True)
    registrar_usuario(
        session,
        _datos(nombre="beto", email="beto@hospital.org"),
        codigos_reutilizables=True,
    )
    assert len(session.exec(select(Usuario)).all()) == 2


def test_codigo_inexistente(session, codigos):
    with pytest.raises(ErrorValidacion):
        registrar_usuario(session, _datos(codigo="NO-EXISTE"))


def test_nombre_duplicado_es_conflicto(session, codigos):
    registrar_usuario(session, _datos(), codigos_reutilizables=True)
    with pytest.raises(ErrorConflicto):
        registrar_usuario(
            session, _datos(email="otra@hospital.org"), codigos_reutilizables=True
        )


def test_registro_con_email_invalido(session, codigos):
    with pytest.raises(ErrorValidacion):
        registrar_usuario(session, _datos(email="no-es-email"))


def test_autenticar(session, codigos):
    usuario = registrar_usuario(session, _datos())

    principal = autenticar(session, "ana", "secreta")
    assert principal == Principal(id_usuario=usuario.id, rol=Rol.INVESTIGADOR, nombre="ana")
    assert autenticar(session, "ana", "incorrecta") is None
    assert autenticar(session, "nadie", "secreta") is None


def test_actualizar_perfil_cambia_contrasena_solo_si_se_envia(session, codigos):
    usuario = registrar_usuario(session, _datos())

    actualizar_perfil(
        session, usuario.id, {"nombre": "ana", "email": "ana@clinica.org", "contrasena": ""}
    )
    assert autenticar(session, "ana", "secreta") is not None

    actualizar_perfil(
        session,
        usuario.id,
        {"nombre": "ana", "email": "ana@clinica.org", "contrasena": "nueva"},
    )
    assert autenticar(session, "ana", "secreta") is None
    assert autenticar(session, "ana", "nueva") is not None


def test_listar_y_actualizar_usuarios(session, codigos):
    ana = registrar_usuario(session, _datos())
    registrar_usuario(session, _datos("zoe", "zoe@hospital.org", "ADM-001"))
    registrar_usuario(session, _datos("beto", "beto@hospital.org", "ASI-001"))

    assert [u.nombre for u in listar_usuarios(session)] == ["zoe", "beto", "ana"]

    cambiado = actualizar_usuario(
        session, ana.id, {"nombre": "ana", "email": ana.email, "rol": "ASISTENTE"}
    )
    assert cambiado.rol == Rol.ASISTENTE


def test_eliminar_usuario(session, codigos):
    admin = registrar_usuario(session, _datos("zoe", "zoe@hospital.org", "ADM-001"))
    ana = registrar_usuario(session, _datos())
    principal = Principal(id_usuario=admin.id, rol=Rol.ADMIN, nombre="zoe")

    with pytest.raises(AccesoDenegado):
        eliminar_usuario(session, principal, admin.id)

    eliminar_usuario(session, principal, ana.id)
    assert session.get(Usuario, ana.id) is None

    with pytest.raises(NoEncontrado):
        eliminar_usuario(session, principal, ana.id)

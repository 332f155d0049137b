"""
Servicio de usuarios: registro por código, autenticación, perfil y gestión

La gestión de otros usuarios es exclusiva de ADMIN; la autorización se
verifica en las dependencias de las rutas.
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy import update
from sqlmodel import Session, select

from app_types.usuarios import (
    ActualizacionPerfil,
    ActualizacionUsuario,
    Principal,
    RegistroUsuario,
    UsuarioRespuesta,
)
from models.tables import CodigoRegistro, Usuario
from services.acceso import verificar_no_es_propia_cuenta
from services.errores import ErrorValidacion, NoEncontrado
from services.transacciones import describir_validacion, unidad_de_trabajo
from utils.logging_config import get_logger
from utils.seguridad import hash_contrasena, verificar_contrasena
from utils.settings import get_settings

logger = get_logger(__name__)

MENSAJE_DUPLICADO = "El nombre de usuario o email ya están en uso."


def _validar(modelo, datos):
    try:
        return modelo.model_validate(datos)
    except ValidationError as e:
        raise ErrorValidacion(describir_validacion(e)) from e


def _obtener_o_fallar(session: Session, id_usuario: int) -> Usuario:
    usuario = session.get(Usuario, id_usuario)
    if usuario is None:
        raise NoEncontrado(f"Usuario {id_usuario} no encontrado.")
    return usuario


def registrar_usuario(
    session: Session,
    datos: Union[RegistroUsuario, Mapping[str, Any]],
    codigos_reutilizables: Optional[bool] = None,
) -> UsuarioRespuesta:
    """
    Registrar un usuario canjeando un código de registro

    El rol se toma del código. Salvo que los códigos sean reutilizables, el
    código se marca como usado en la misma transacción con un UPDATE
    condicional, de modo que dos registros simultáneos no lo canjean dos veces.

    Args:
        session: Sesión de base de datos
        datos: nombre, email, contraseña y código
        codigos_reutilizables: Sobrescribe la configuración si se indica

    Returns:
        UsuarioRespuesta del usuario creado

    Raises:
        ErrorValidacion: Código inexistente o ya usado
        ErrorConflicto: Nombre de usuario o email repetidos
    """
    datos = _validar(RegistroUsuario, datos)
    if codigos_reutilizables is None:
        codigos_reutilizables = get_settings().codigos_reutilizables

    with unidad_de_trabajo(session, mensaje_conflicto=MENSAJE_DUPLICADO):
        codigo = session.get(CodigoRegistro, datos.codigo)
        if codigo is None:
            raise ErrorValidacion("Código de registro inválido.")

        if not codigos_reutilizables:
            result = session.execute(
                update(CodigoRegistro)
                .where(CodigoRegistro.codigo == datos.codigo)
                .where(CodigoRegistro.usado == False)  # noqa: E712
                .values(usado=True, fecha_uso=datetime.now(timezone.utc))
            )
            if result.rowcount != 1:
                raise ErrorValidacion("El código de registro ya fue utilizado.")

        usuario = Usuario(
            nombre=datos.nombre,
            email=datos.email,
            contrasena=hash_contrasena(datos.contrasena),
            rol=codigo.tipo_usuario,
        )
        session.add(usuario)
        session.flush()
        respuesta = UsuarioRespuesta.model_validate(usuario)

    logger.info(f"Usuario registrado: {respuesta.nombre} ({respuesta.rol.value})")
    return respuesta


def autenticar(session: Session, nombre: str, contrasena: str) -> Optional[Principal]:
    """Verificar credenciales y devolver el principal, o None si no coinciden"""
    usuario = session.exec(select(Usuario).where(Usuario.nombre == nombre)).first()
    if usuario is None or not verificar_contrasena(contrasena, usuario.contrasena):
        logger.warning(f"Inicio de sesión fallido para: {nombre}")
        return None
    return Principal(id_usuario=usuario.id, rol=usuario.rol, nombre=usuario.nombre)


def obtener_usuario(session: Session, id_usuario: int) -> UsuarioRespuesta:
    return UsuarioRespuesta.model_validate(_obtener_o_fallar(session, id_usuario))


def listar_usuarios(session: Session) -> List[UsuarioRespuesta]:
    usuarios = session.exec(select(Usuario).order_by(Usuario.rol, Usuario.nombre)).all()
    return [UsuarioRespuesta.model_validate(u) for u in usuarios]


def actualizar_usuario(
    session: Session,
    id_usuario: int,
    datos: Union[ActualizacionUsuario, Mapping[str, Any]],
) -> UsuarioRespuesta:
    """Cambiar nombre, email y rol de un usuario (operación de ADMIN)"""
    datos = _validar(ActualizacionUsuario, datos)
    with unidad_de_trabajo(session, mensaje_conflicto=MENSAJE_DUPLICADO):
        usuario = _obtener_o_fallar(session, id_usuario)
        for key, value in datos.model_dump(mode="json").items():
            setattr(usuario, key, value)
        session.add(usuario)
        session.flush()
        respuesta = UsuarioRespuesta.model_validate(usuario)

    logger.info(f"Usuario {id_usuario} actualizado")
    return respuesta


def eliminar_usuario(session: Session, principal: Principal, id_usuario: int) -> None:
    """
    Eliminar un usuario (operación de ADMIN)

    Raises:
        AccesoDenegado: Si el administrador intenta eliminar su propia cuenta
        NoEncontrado: Si el usuario no existe
    """
    verificar_no_es_propia_cuenta(principal, id_usuario)
    with unidad_de_trabajo(session):
        usuario = _obtener_o_fallar(session, id_usuario)
        session.delete(usuario)

    logger.info(f"Usuario {id_usuario} eliminado por {principal.id_usuario}")


def actualizar_perfil(
    session: Session,
    id_usuario: int,
    datos: Union[ActualizacionPerfil, Mapping[str, Any]],
) -> UsuarioRespuesta:
    """
    Actualizar el propio perfil; la contraseña solo cambia si se envía
    """
    datos = _validar(ActualizacionPerfil, datos)
    with unidad_de_trabajo(session, mensaje_conflicto=MENSAJE_DUPLICADO):
        usuario = _obtener_o_fallar(session, id_usuario)
        usuario.nombre = datos.nombre
        usuario.email = datos.email
        if datos.contrasena:
            usuario.contrasena = hash_contrasena(datos.contrasena)
        session.add(usuario)
        session.flush()
        respuesta = UsuarioRespuesta.model_validate(usuario)

    return respuesta

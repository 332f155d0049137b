"""
Control de acceso por rol

Relaciona la identidad autenticada y su rol con las operaciones permitidas.
Las comprobaciones son puras: devuelven el principal o lanzan AccesoDenegado.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional

from app_types.usuarios import Principal, Rol
from services.errores import AccesoDenegado
from utils.logging_config import get_logger

logger = get_logger(__name__)


class Capacidad(str, Enum):
    """
    Operaciones sujetas a autorización
    """

    LISTAR_ESTUDIOS = "listar_estudios"
    VER_ESTUDIO = "ver_estudio"
    BUSCAR_PATOLOGIAS = "buscar_patologias"
    VER_PERFIL = "ver_perfil"
    EDITAR_PERFIL = "editar_perfil"
    SUBIR_ESTUDIO = "subir_estudio"
    EDITAR_ESTUDIO = "editar_estudio"
    ELIMINAR_ESTUDIO = "eliminar_estudio"
    GESTIONAR_USUARIOS = "gestionar_usuarios"


TODOS_LOS_ROLES: FrozenSet[Rol] = frozenset(Rol)
ROLES_EDICION: FrozenSet[Rol] = frozenset({Rol.ADMIN, Rol.INVESTIGADOR})
SOLO_ADMIN: FrozenSet[Rol] = frozenset({Rol.ADMIN})

PERMISOS: Dict[Capacidad, FrozenSet[Rol]] = {
    Capacidad.LISTAR_ESTUDIOS: TODOS_LOS_ROLES,
    Capacidad.VER_ESTUDIO: TODOS_LOS_ROLES,
    Capacidad.BUSCAR_PATOLOGIAS: TODOS_LOS_ROLES,
    Capacidad.VER_PERFIL: TODOS_LOS_ROLES,
    Capacidad.EDITAR_PERFIL: TODOS_LOS_ROLES,
    Capacidad.SUBIR_ESTUDIO: ROLES_EDICION,
    Capacidad.EDITAR_ESTUDIO: ROLES_EDICION,
    Capacidad.ELIMINAR_ESTUDIO: SOLO_ADMIN,
    Capacidad.GESTIONAR_USUARIOS: SOLO_ADMIN,
}


def requerir_autenticacion(principal: Optional[Principal]) -> Principal:
    """Compuerta de autenticación: cualquier rol con sesión iniciada"""
    if principal is None:
        raise AccesoDenegado("Debe iniciar sesión.")
    return principal


def requerir_rol(principal: Optional[Principal], roles: FrozenSet[Rol]) -> Principal:
    """Compuerta de rol: el rol del principal debe pertenecer a `roles`"""
    principal = requerir_autenticacion(principal)
    if principal.rol not in roles:
        logger.warning(
            f"Acceso denegado al usuario {principal.id_usuario} con rol {principal.rol.value}"
        )
        raise AccesoDenegado(
            f"Su rol ({principal.rol.value}) no tiene permiso para esta operación."
        )
    return principal


def autorizar(principal: Optional[Principal], capacidad: Capacidad) -> Principal:
    """
    Verificar que el principal puede ejecutar la operación

    Args:
        principal: Identidad autenticada o None si no hay sesión
        capacidad: Operación solicitada

    Returns:
        El mismo principal si la operación está permitida

    Raises:
        AccesoDenegado: Si no hay sesión o el rol no está permitido
    """
    return requerir_rol(principal, PERMISOS[capacidad])


def verificar_no_es_propia_cuenta(principal: Principal, id_usuario: int) -> None:
    """Un usuario no puede eliminar su propia cuenta desde la gestión de usuarios"""
    if principal.id_usuario == id_usuario:
        raise AccesoDenegado("No puede eliminar su propia cuenta desde este panel.")

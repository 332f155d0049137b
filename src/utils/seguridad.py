"""
Utilidades de seguridad: hash de contraseñas y tokens de acceso JWT
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt.exceptions import InvalidTokenError
from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher
from pwdlib.hashers.bcrypt import BcryptHasher

from app_types.usuarios import Principal, Rol
from utils.logging_config import get_logger
from utils.settings import get_settings

logger = get_logger(__name__)

ALGORITHM = "HS256"

# Argon2 para hashes nuevos; bcrypt verifica las contraseñas ya existentes
password_hash = PasswordHash((Argon2Hasher(), BcryptHasher()))


def verificar_contrasena(contrasena: str, hash_guardado: str) -> bool:
    return password_hash.verify(contrasena, hash_guardado)


def hash_contrasena(contrasena: str) -> str:
    return password_hash.hash(contrasena)


def crear_token_acceso(
    principal: Principal, expira_en: Optional[timedelta] = None
) -> str:
    """
    Crear un token JWT firmado para el principal

    Args:
        principal: Identidad del usuario (id, rol y nombre)
        expira_en: Duración personalizada; por defecto la configurada

    Returns:
        Token JWT codificado
    """
    settings = get_settings()
    if expira_en is None:
        expira_en = timedelta(minutes=settings.access_token_expire_minutes)

    payload = {
        "sub": str(principal.id_usuario),
        "rol": principal.rol.value,
        "nombre": principal.nombre,
        "exp": datetime.now(timezone.utc) + expira_en,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decodificar_token(token: str) -> Optional[Principal]:
    """Decodificar y validar un JWT. Devuelve None si es inválido o expiró"""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        return Principal(
            id_usuario=int(payload["sub"]),
            rol=Rol(payload["rol"]),
            nombre=payload.get("nombre", ""),
        )
    except (InvalidTokenError, KeyError, ValueError) as e:
        logger.warning(f"Token rechazado: {e}")
        return None

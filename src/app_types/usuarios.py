"""
Pydantic types for users, registration and authentication
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class Rol(str, Enum):
    """
    Roles de usuario; determinan todas las autorizaciones
    """

    ADMIN = "ADMIN"
    INVESTIGADOR = "INVESTIGADOR"
    ASISTENTE = "ASISTENTE"


class Principal(BaseModel):
    """
    Identidad autenticada asociada a cada solicitud
    """

    id_usuario: int
    rol: Rol
    nombre: str = ""


class RegistroUsuario(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    contrasena: str = Field(..., min_length=1)
    codigo: str = Field(..., min_length=1, description="Código de registro")


class ActualizacionPerfil(BaseModel):
    """
    Cambios del propio perfil; la contraseña vacía no se modifica
    """

    nombre: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    contrasena: Optional[str] = None


class ActualizacionUsuario(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    rol: Rol


class UsuarioRespuesta(BaseModel):
    id: int
    nombre: str
    email: str
    rol: Rol

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

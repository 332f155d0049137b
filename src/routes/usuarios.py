"""
Rutas de autenticación, perfil y gestión de usuarios

Este módulo contiene los endpoints para:
- Inicio de sesión (token Bearer) y registro con código
- Consulta y edición del propio perfil
- Gestión de usuarios (solo ADMIN)
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session

from app_types.usuarios import Principal, Token, UsuarioRespuesta
from routes.dependencias import requiere
from services.acceso import Capacidad
from services.usuarios import (
    actualizar_perfil,
    actualizar_usuario,
    autenticar,
    eliminar_usuario,
    listar_usuarios,
    obtener_usuario,
    registrar_usuario,
)
from utils.seguridad import crear_token_acceso
from utils.settings import get_session

router_auth = APIRouter(prefix="/auth", tags=["auth"])
router_perfil = APIRouter(prefix="/perfil", tags=["perfil"])
router = APIRouter(prefix="/usuarios", tags=["usuarios"])


@router_auth.post("/token", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
) -> Token:
    """Iniciar sesión con nombre de usuario y contraseña"""
    principal = autenticar(session, form_data.username, form_data.password)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario o contraseña incorrectos.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=crear_token_acceso(principal))


@router_auth.post(
    "/registro", response_model=UsuarioRespuesta, status_code=status.HTTP_201_CREATED
)
def registro(
    datos: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
) -> UsuarioRespuesta:
    """Registrar un usuario con un código que determina su rol"""
    return registrar_usuario(session, datos)


@router_perfil.get("", response_model=UsuarioRespuesta)
def ver_perfil(
    session: Session = Depends(get_session),
    principal: Principal = Depends(requiere(Capacidad.VER_PERFIL)),
) -> UsuarioRespuesta:
    return obtener_usuario(session, principal.id_usuario)


@router_perfil.put("", response_model=UsuarioRespuesta)
def editar_perfil(
    datos: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
    principal: Principal = Depends(requiere(Capacidad.EDITAR_PERFIL)),
) -> UsuarioRespuesta:
    """Actualizar nombre, email y opcionalmente la contraseña propia"""
    return actualizar_perfil(session, principal.id_usuario, datos)


@router.get("", response_model=List[UsuarioRespuesta])
def listar(
    session: Session = Depends(get_session),
    principal: Principal = Depends(requiere(Capacidad.GESTIONAR_USUARIOS)),
) -> List[UsuarioRespuesta]:
    """Listar usuarios ordenados por rol y nombre"""
    return listar_usuarios(session)


@router.get("/{id_usuario}", response_model=UsuarioRespuesta)
def ver_usuario(
    id_usuario: int,
    session: Session = Depends(get_session),
    principal: Principal = Depends(requiere(Capacidad.GESTIONAR_USUARIOS)),
) -> UsuarioRespuesta:
    return obtener_usuario(session, id_usuario)


@router.put("/{id_usuario}", response_model=UsuarioRespuesta)
def editar_usuario(
    id_usuario: int,
    datos: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
    principal: Principal = Depends(requiere(Capacidad.GESTIONAR_USUARIOS)),
) -> UsuarioRespuesta:
    """Cambiar nombre, email y rol de un usuario"""
    return actualizar_usuario(session, id_usuario, datos)


@router.delete("/{id_usuario}", status_code=status.HTTP_204_NO_CONTENT)
def borrar_usuario(
    id_usuario: int,
    session: Session = Depends(get_session),
    principal: Principal = Depends(requiere(Capacidad.GESTIONAR_USUARIOS)),
) -> Response:
    """Eliminar un usuario; no se permite eliminar la propia cuenta"""
    eliminar_usuario(session, principal, id_usuario)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

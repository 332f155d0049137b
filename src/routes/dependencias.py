"""
Dependencias compartidas de las rutas: sesión, almacenamiento y autorización
"""

from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app_types.usuarios import Principal
from services.acceso import Capacidad, autorizar
from services.almacenamiento import AlmacenamientoArchivos
from utils.seguridad import decodificar_token
from utils.settings import Settings, get_settings

# Extrae el token del encabezado Authorization
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_almacenamiento(
    settings: Settings = Depends(get_settings),
) -> AlmacenamientoArchivos:
    return AlmacenamientoArchivos(settings.upload_dir, settings.upload_url_prefix)


async def get_principal(token: Optional[str] = Depends(oauth2_scheme)) -> Principal:
    """
    Resolver el principal autenticado a partir del token Bearer

    Raises:
        HTTPException: 401 si no hay token o no es válido
    """
    principal = decodificar_token(token) if token else None
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No se pudieron validar las credenciales",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def requiere(capacidad: Capacidad) -> Callable[..., Principal]:
    """
    Crear una dependencia que exige la capacidad indicada

    El AccesoDenegado resultante se convierte en 403 por el manejador global.
    """

    def dependencia(principal: Principal = Depends(get_principal)) -> Principal:
        return autorizar(principal, capacidad)

    return dependencia

"""
Routes package - routers de estudios, patologías, autenticación y usuarios
"""

from routes.estudios import router as estudios_router
from routes.estudios import router_patologias as patologias_router
from routes.usuarios import router as usuarios_router
from routes.usuarios import router_auth as auth_router
from routes.usuarios import router_perfil as perfil_router

__all__ = [
    "estudios_router",
    "patologias_router",
    "auth_router",
    "perfil_router",
    "usuarios_router",
]

"""
API del Catálogo de Estudios Doppler Transcraneal
FastAPI application con routers de estudios, patologías, autenticación y usuarios
"""

import os
import time
from datetime import datetime

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session, text

from app_types.monitoring import HealthStatus
from routes import (
    auth_router,
    estudios_router,
    patologias_router,
    perfil_router,
    usuarios_router,
)
from services.errores import ErrorCatalogo
from utils.logging_config import get_logger, setup_logging
from utils.settings import advertir_clave_por_defecto, engine, settings

# Configurar sistema de logging
setup_logging(settings.log_level)
logger = get_logger(__name__)

# Registrar tiempo de inicio para cálculo de uptime
startup_time = time.time()

VERSION = "1.0.0"

# ============================================================================
# CONFIGURACIÓN DE LA APLICACIÓN
# ============================================================================

app = FastAPI(
    title="API del Catálogo de Estudios Doppler",
    description="Catálogo de estudios de Doppler transcraneal: pacientes, estudios, archivos y hallazgos",
    version=VERSION,
)

# Incluir routers
app.include_router(auth_router)
app.include_router(perfil_router)
app.include_router(usuarios_router)
app.include_router(estudios_router)
app.include_router(patologias_router)


@app.exception_handler(ErrorCatalogo)
async def error_catalogo_handler(request: Request, exc: ErrorCatalogo) -> JSONResponse:
    """Convertir los errores del catálogo en respuestas JSON con su código"""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} en {request.url.path}: {exc.mensaje}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.mensaje})


@app.on_event("startup")
async def startup_event():
    """Inicializar servicios al arrancar la aplicación"""
    logger.info("Iniciando API...")
    advertir_clave_por_defecto(settings)
    os.makedirs(settings.upload_dir, exist_ok=True)
    logger.info(f"Directorio de subidas listo: {settings.upload_dir}")
    try:
        with Session(engine) as session:
            session.execute(text("SELECT 1"))
        logger.info("Conexión exitosa a la base de datos")
    except Exception as e:
        logger.error(f"Error al conectar a la base de datos. Verifique el .env: {e}")


@app.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """
    Endpoint de verificación de salud del sistema

    Verifica la base de datos y el directorio de subidas.
    """
    db_connected = False
    try:
        with Session(engine) as session:
            session.execute(text("SELECT 1"))
            db_connected = True
    except Exception as e:
        logger.error(f"Falló verificación de conexión a base de datos: {e}")

    upload_dir_writable = os.path.isdir(settings.upload_dir) and os.access(
        settings.upload_dir, os.W_OK
    )

    uptime = time.time() - startup_time

    return HealthStatus(
        status="healthy" if db_connected and upload_dir_writable else "unhealthy",
        database_connected=db_connected,
        upload_dir_writable=upload_dir_writable,
        timestamp=datetime.now(),
        uptime_seconds=round(uptime, 2),
        version=VERSION,
    )


# ============================================================================
# EJECUTAR SERVIDOR
# ============================================================================

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=False,
    )

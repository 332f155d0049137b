"""
Configuración de la aplicación y base de datos

Gestiona variables de entorno, la conexión a la base de datos PostgreSQL
y el directorio de archivos de ultrasonido.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from utils.logging_config import get_logger

logger = get_logger(__name__)

CLAVE_POR_DEFECTO = "clave-insegura-cambiar-en-produccion"


class Settings(BaseSettings):
    """Configuración de la aplicación cargada desde variables de entorno"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Base de datos
    db_username: str = "postgres"
    db_password: str = ""
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "catalogo_doppler"
    db_url: Optional[str] = None

    # Seguridad
    secret_key: str = CLAVE_POR_DEFECTO
    access_token_expire_minutes: int = 60 * 24

    # Archivos de ultrasonido
    upload_dir: str = "uploads/ultrasonidos"
    upload_url_prefix: str = "/uploads/ultrasonidos"

    # Registro de usuarios
    codigos_reutilizables: bool = False

    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        """Construir URL de conexión a PostgreSQL"""
        if self.db_url:
            return self.db_url
        return f"postgresql+psycopg://{self.db_username}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"


def configurar_sqlite(engine: Engine) -> Engine:
    """
    Habilitar claves foráneas y SAVEPOINT reales en conexiones SQLite

    pysqlite gestiona las transacciones por su cuenta; se desactiva ese
    comportamiento y se emite BEGIN explícitamente.
    """

    @event.listens_for(engine, "connect")
    def _al_conectar(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _al_iniciar(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def crear_motor(url: str, **kwargs) -> Engine:
    """Crear el motor de base de datos con el pool de conexiones"""
    if url.startswith("sqlite"):
        motor = create_engine(
            url, connect_args={"check_same_thread": False}, **kwargs
        )
        return configurar_sqlite(motor)
    return create_engine(url, pool_pre_ping=True, **kwargs)


# Instancia global de configuración
settings = Settings()

# Motor de base de datos
engine = crear_motor(settings.database_url, echo=False)


def get_settings() -> Settings:
    return settings


def advertir_clave_por_defecto(config: Settings) -> bool:
    """
    Advertir si los tokens se firman con la clave por defecto

    Returns:
        True si se está usando la clave por defecto
    """
    if config.secret_key != CLAVE_POR_DEFECTO:
        return False
    logger.warning(
        "SECRET_KEY no está configurada: los tokens se firman con la clave por "
        "defecto y cualquiera podría emitirlos. Defina SECRET_KEY en el entorno."
    )
    return True


def get_session():
    """
    Función de dependencia para obtener sesión de base de datos

    Yields:
        Session: Sesión de SQLModel para consultas a la base de datos
    """
    with Session(engine) as session:
        yield session

"""
Modelos de base de datos del catálogo de estudios Doppler transcraneal

Define las tablas principales de la base de datos:
- Usuario / CodigoRegistro: cuentas y códigos de alta por rol
- Paciente: datos demográficos, uno por estudio subido
- Patologia: nombres de diagnóstico normalizados y únicos
- Estudio: examen Doppler con su archivo principal
- ImagenEstudio: referencia al archivo almacenado del estudio
- EstudioPatologia: hallazgo (patología + severidad) de un estudio
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


def ahora_utc() -> datetime:
    """Marca de tiempo con zona horaria (UTC) para columnas de fecha"""
    return datetime.now(timezone.utc)


# ============================================================================
# MODELOS DE USUARIOS
# ============================================================================
class Usuario(SQLModel, table=True):
    """
    Modelo de la tabla usuarios

    Nombre y email son únicos; el rol determina las autorizaciones.
    """

    __tablename__ = "usuarios"

    id: Optional[int] = Field(default=None, primary_key=True)
    nombre: str = Field(max_length=100, unique=True, index=True)
    email: str = Field(max_length=255, unique=True)
    contrasena: str = Field(max_length=255)
    rol: str = Field(max_length=20)


class CodigoRegistro(SQLModel, table=True):
    """
    Modelo de la tabla codigos_usuarios

    Código que se canjea al registrarse y otorga el rol `tipo_usuario`.
    """

    __tablename__ = "codigos_usuarios"

    codigo: str = Field(primary_key=True, max_length=64)
    tipo_usuario: str = Field(max_length=20)
    usado: bool = Field(default=False)
    fecha_uso: Optional[datetime] = Field(default=None)


# ============================================================================
# MODELO PACIENTE
# ============================================================================
class Paciente(SQLModel, table=True):
    """
    Modelo de la tabla pacientes

    Cada subida de estudio crea un paciente nuevo; no se deduplican.
    """

    __tablename__ = "pacientes"

    id_paciente: Optional[int] = Field(default=None, primary_key=True)
    edad: int
    genero: str = Field(max_length=20)
    notas_generales: Optional[str] = Field(default=None)

    estudios: List["Estudio"] = Relationship(back_populates="paciente")


# ============================================================================
# MODELO PATOLOGIA
# ============================================================================
class Patologia(SQLModel, table=True):
    """
    Modelo de la tabla patologias

    El nombre se guarda normalizado (mayúsculas, sin espacios en los extremos)
    y la restricción UNIQUE impide duplicados bajo creación concurrente.
    """

    __tablename__ = "patologias"

    id_patologia: Optional[int] = Field(default=None, primary_key=True)
    nombre_patologia: str = Field(max_length=255, unique=True, index=True)

    hallazgos: List["EstudioPatologia"] = Relationship(back_populates="patologia")


# ============================================================================
# MODELO ESTUDIO
# ============================================================================
class Estudio(SQLModel, table=True):
    """
    Modelo de la tabla estudios

    Un estudio pertenece a un paciente y es dueño de sus referencias de
    imagen y de su hallazgo: se eliminan en cascada con él.
    """

    __tablename__ = "estudios"

    id_estudio: Optional[int] = Field(default=None, primary_key=True)
    id_paciente: int = Field(foreign_key="pacientes.id_paciente", index=True)
    archivo_ruta: str = Field(max_length=500)
    perspectiva: str = Field(max_length=30)
    vaso_evaluado: str = Field(max_length=30)
    lado: str = Field(max_length=20)
    fecha_estudio: datetime = Field(default_factory=ahora_utc, index=True)

    paciente: Paciente = Relationship(back_populates="estudios")
    imagenes: List["ImagenEstudio"] = Relationship(
        back_populates="estudio",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    hallazgos: List["EstudioPatologia"] = Relationship(
        back_populates="estudio",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class ImagenEstudio(SQLModel, table=True):
    """
    Modelo de la tabla imagenes_estudio (referencia al archivo almacenado)
    """

    __tablename__ = "imagenes_estudio"

    id_imagen: Optional[int] = Field(default=None, primary_key=True)
    id_estudio: int = Field(
        foreign_key="estudios.id_estudio", ondelete="CASCADE", index=True
    )
    ruta_archivo: str = Field(max_length=500)

    estudio: Estudio = Relationship(back_populates="imagenes")


class EstudioPatologia(SQLModel, table=True):
    """
    Modelo de la tabla estudios_patologias (hallazgo diagnóstico)
    """

    __tablename__ = "estudios_patologias"

    id_estudio: int = Field(
        foreign_key="estudios.id_estudio", ondelete="CASCADE", primary_key=True
    )
    id_patologia: int = Field(
        foreign_key="patologias.id_patologia", primary_key=True
    )
    grado_severidad: str = Field(max_length=20)
    nota_especifica: Optional[str] = Field(default=None)

    estudio: Estudio = Relationship(back_populates="hallazgos")
    patologia: Patologia = Relationship(back_populates="hallazgos")

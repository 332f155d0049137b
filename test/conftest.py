"""
Fixtures compartidas: base SQLite temporal, almacén de archivos y cliente HTTP
"""

import io
import os
from datetime import datetime, timezone
from typing import Optional

# La configuración global debe apuntar a SQLite antes de importar la aplicación
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

import models  # noqa: E402,F401
from app_types.usuarios import Principal, Rol  # noqa: E402
from models.tables import (  # noqa: E402
    Estudio,
    EstudioPatologia,
    ImagenEstudio,
    Paciente,
    Patologia,
)
from services.almacenamiento import AlmacenamientoArchivos  # noqa: E402
from utils.seguridad import crear_token_acceso  # noqa: E402
from utils.settings import crear_motor  # noqa: E402

PACIENTE = {"edad": 45, "genero": "FEMENINO", "notas_generales": "Cefalea crónica"}
ESTUDIO = {"perspectiva": "TRANSTEMPORAL", "vaso_evaluado": "ACM", "lado": "DERECHO"}
HALLAZGO = {
    "nombre_patologia": "Estenosis",
    "grado_severidad": "MODERADO",
    "nota_especifica": "Velocidad media elevada",
}


@pytest.fixture
def engine(tmp_path):
    motor = crear_motor(f"sqlite:///{tmp_path / 'catalogo.db'}")
    SQLModel.metadata.create_all(motor)
    yield motor
    motor.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def almacenamiento(tmp_path):
    almacen = AlmacenamientoArchivos(tmp_path / "uploads", "/uploads/ultrasonidos")
    almacen.preparar()
    return almacen


@pytest.fixture
def archivo_subido(almacenamiento):
    """Archivo ya escrito en el almacén, como lo deja la capa de subida"""
    return almacenamiento.guardar("doppler.png", io.BytesIO(b"\x89PNG datos"))


@pytest.fixture
def crear_estudio(engine):
    """Insertar directamente un estudio completo con fecha controlada"""

    def _crear(
        edad: int = 40,
        genero: str = "MASCULINO",
        vaso_evaluado: str = "ACM",
        lado: str = "DERECHO",
        perspectiva: str = "TRANSTEMPORAL",
        patologia: Optional[str] = "ESTENOSIS",
        fecha: Optional[datetime] = None,
    ) -> int:
        with Session(engine) as s:
            paciente = Paciente(edad=edad, genero=genero)
            s.add(paciente)
            s.flush()
            estudio = Estudio(
                id_paciente=paciente.id_paciente,
                archivo_ruta=f"/uploads/ultrasonidos/imagen_estudio-{paciente.id_paciente}.png",
                perspectiva=perspectiva,
                vaso_evaluado=vaso_evaluado,
                lado=lado,
                fecha_estudio=fecha or datetime.now(timezone.utc),
            )
            s.add(estudio)
            s.flush()
            s.add(ImagenEstudio(id_estudio=estudio.id_estudio, ruta_archivo=estudio.archivo_ruta))
            if patologia is not None:
                existente = s.query(Patologia).filter_by(nombre_patologia=patologia).first()
                if existente is None:
                    existente = Patologia(nombre_patologia=patologia)
                    s.add(existente)
                    s.flush()
                s.add(
                    EstudioPatologia(
                        id_estudio=estudio.id_estudio,
                        id_patologia=existente.id_patologia,
                        grado_severidad="LEVE",
                    )
                )
            id_estudio = estudio.id_estudio
            s.commit()
        return id_estudio

    return _crear


def encabezados(id_usuario: int = 1, rol: Rol = Rol.ADMIN, nombre: str = "admin") -> dict:
    token = crear_token_acceso(Principal(id_usuario=id_usuario, rol=rol, nombre=nombre))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(engine, almacenamiento):
    from main import app
    from routes.dependencias import get_almacenamiento
    from utils.settings import get_session

    def _session_de_prueba():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_de_prueba
    app.dependency_overrides[get_almacenamiento] = lambda: almacenamiento
    yield TestClient(app)
    app.dependency_overrides.clear()

import io

import pytest

from services.almacenamiento import AlmacenamientoArchivos
from services.errores import ErrorAlmacenamiento


class FlujoQueFalla(io.RawIOBase):
    """Entrega un primer bloque y luego falla como un disco o socket roto"""

    def __init__(self, bytes_antes_de_fallar: int = 1024):
        self.pendientes = bytes_antes_de_fallar

    def readable(self):
        return True

    def read(self, size=-1):
        if self.pendientes <= 0:
            raise OSError("conexión interrumpida")
        bloque = b"x" * self.pendientes
        self.pendientes = 0
        return bloque


def test_guardar_y_eliminar(almacenamiento):
    ruta = almacenamiento.guardar("Doppler.PNG", io.BytesIO(b"datos"))

    assert ruta.startswith("/uploads/ultrasonidos/imagen_estudio-")
    assert ruta.endswith(".png")
    assert almacenamiento.ruta_fisica(ruta).read_bytes() == b"datos"

    almacenamiento.eliminar(ruta)
    assert not almacenamiento.existe(ruta)
    with pytest.raises(FileNotFoundError):
        almacenamiento.eliminar(ruta)


def test_ruta_fisica_usa_solo_el_nombre_base(almacenamiento):
    fisica = almacenamiento.ruta_fisica("/uploads/ultrasonidos/../../etc/passwd")
    assert fisica == almacenamiento.directorio / "passwd"


def test_escritura_interrumpida_no_deja_archivo_parcial(almacenamiento):
    with pytest.raises(ErrorAlmacenamiento):
        almacenamiento.guardar("doppler.png", FlujoQueFalla())

    assert list(almacenamiento.directorio.iterdir()) == []


def test_directorio_no_utilizable(tmp_path):
    ocupado = tmp_path / "ocupado"
    ocupado.write_text("no es un directorio")
    almacen = AlmacenamientoArchivos(ocupado)

    with pytest.raises(ErrorAlmacenamiento):
        almacen.guardar("doppler.png", io.BytesIO(b"datos"))
    assert ocupado.read_text() == "no es un directorio"

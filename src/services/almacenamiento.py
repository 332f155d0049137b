"""
Almacenamiento de archivos de ultrasonido en disco

Entrega una ruta estable (con forma de URL) para cada archivo subido y
permite eliminarlo a partir de esa misma ruta.
"""

import random
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Optional, Union

from services.errores import ErrorAlmacenamiento
from utils.logging_config import get_logger

logger = get_logger(__name__)

CAMPO_ARCHIVO = "imagen_estudio"


class AlmacenamientoArchivos:
    """
    Almacén de archivos de estudios en un directorio local

    Las rutas devueltas tienen la forma `<prefijo_url>/<nombre>`; solo el
    nombre base se usa para ubicar el archivo físico.
    """

    def __init__(
        self, directorio: Union[str, Path], prefijo_url: str = "/uploads/ultrasonidos"
    ):
        self.directorio = Path(directorio)
        self.prefijo_url = prefijo_url.rstrip("/")

    def preparar(self) -> None:
        """Crear el directorio de subidas si no existe"""
        self.directorio.mkdir(parents=True, exist_ok=True)

    def generar_nombre(self, nombre_original: Optional[str]) -> str:
        """Nombre único: campo-milisegundos-aleatorio.extensión"""
        extension = Path(nombre_original or "").suffix.lower()
        sufijo_unico = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"{CAMPO_ARCHIVO}-{sufijo_unico}{extension}"

    def guardar(self, nombre_original: Optional[str], contenido: BinaryIO) -> str:
        """
        Escribir el contenido subido y devolver su ruta estable

        Args:
            nombre_original: Nombre del archivo enviado por el cliente
            contenido: Flujo binario con los bytes del archivo

        Returns:
            Ruta estable del archivo, p. ej. /uploads/ultrasonidos/imagen_estudio-...png

        Raises:
            ErrorAlmacenamiento: Si el archivo no se pudo escribir; el archivo
                parcial se elimina
        """
        nombre = self.generar_nombre(nombre_original)
        destino_fisico = self.directorio / nombre
        try:
            self.preparar()
            with open(destino_fisico, "wb") as destino:
                shutil.copyfileobj(contenido, destino)
        except OSError as e:
            if destino_fisico.is_file():
                destino_fisico.unlink()
            logger.error(f"No se pudo almacenar el archivo {nombre}: {e}")
            raise ErrorAlmacenamiento("No se pudo guardar el archivo subido.") from e
        logger.info(f"Archivo almacenado: {nombre}")
        return f"{self.prefijo_url}/{nombre}"

    def ruta_fisica(self, ruta: str) -> Path:
        return self.directorio / Path(ruta).name

    def existe(self, ruta: str) -> bool:
        return self.ruta_fisica(ruta).is_file()

    def eliminar(self, ruta: str) -> None:
        """
        Eliminar el archivo físico de una ruta almacenada

        Raises:
            FileNotFoundError: Si el archivo ya no existe
            OSError: Ante cualquier otro fallo del sistema de archivos
        """
        self.ruta_fisica(ruta).unlink()
        logger.info(f"Archivo eliminado: {Path(ruta).name}")

"""
Errores del catálogo de estudios

Cada tipo es distinto para que la capa HTTP elija mensaje y código de estado.
"""


class ErrorCatalogo(Exception):
    """Error base de las operaciones del catálogo"""

    status_code = 500

    def __init__(self, mensaje: str):
        self.mensaje = mensaje
        super().__init__(mensaje)


class ErrorValidacion(ErrorCatalogo):
    """Entrada inválida o faltante, corregible por el usuario"""

    status_code = 400


class AccesoDenegado(ErrorCatalogo):
    """El rol del usuario no permite la operación"""

    status_code = 403


class NoEncontrado(ErrorCatalogo):
    status_code = 404


class ErrorConflicto(ErrorCatalogo):
    """Violación de unicidad (nombre de usuario, email, etc.)"""

    status_code = 409


class ErrorAlmacenamiento(ErrorCatalogo):
    """Fallo transitorio o estructural de la base de datos o del disco"""

    status_code = 503

from unittest.mock import MagicMock

import pytest
from sqlmodel import Session, select

from models.tables import Patologia
from services import patologias
from services.errores import ErrorValidacion
from services.patologias import (
    buscar_patologias,
    normalizar_nombre,
    resolver_o_crear_patologia,
)


def _todas(session):
    return session.exec(select(Patologia)).all()


def test_normalizar_nombre():
    assert normalizar_nombre("  estenosis ") == "ESTENOSIS"


def test_resolver_crea_y_reutiliza(session):
    primero = resolver_o_crear_patologia(session, "Estenosis")
    session.commit()
    segundo = resolver_o_crear_patologia(session, "  estenosis ")
    tercero = resolver_o_crear_patologia(session, "ESTENOSIS")
    session.commit()

    assert primero == segundo == tercero
    filas = _todas(session)
    assert len(filas) == 1
    assert filas[0].nombre_patologia == "ESTENOSIS"


def test_identificador_explicito_se_usa_tal_cual():
    session = MagicMock()
    assert resolver_o_crear_patologia(session, 7) == 7
    session.exec.assert_not_called()
    session.add.assert_not_called()


@pytest.mark.parametrize("nombre", ["", "   ", None])
def test_nombre_vacio_es_error_de_validacion(session, nombre):
    with pytest.raises(ErrorValidacion):
        resolver_o_crear_patologia(session, nombre)
    assert _todas(session) == []


def test_creacion_concurrente_relee_la_existente(engine, session, monkeypatch):
    # Otra transacción inserta el nombre después de nuestra búsqueda
    with Session(engine) as otra:
        otra.add(Patologia(nombre_patologia="VASOESPASMO"))
        otra.commit()

    buscar_real = patologias._buscar_por_nombre
    llamadas = []

    def buscar_tras_carrera(sesion, nombre):
        llamadas.append(nombre)
        if len(llamadas) == 1:
            return None
        return buscar_real(sesion, nombre)

    monkeypatch.setattr(patologias, "_buscar_por_nombre", buscar_tras_carrera)

    id_patologia = resolver_o_crear_patologia(session, "vasoespasmo")
    session.commit()

    filas = _todas(session)
    assert len(filas) == 1
    assert filas[0].id_patologia == id_patologia
    assert len(llamadas) == 2


@pytest.mark.parametrize("texto", ["", "   ", None])
def test_busqueda_vacia_no_consulta(texto):
    session = MagicMock()
    assert buscar_patologias(session, texto) == []
    session.execute.assert_not_called()


def test_busqueda_por_subcadena_ordenada(session):
    for nombre in ["Vasoespasmo", "Estenosis severa", "Estenosis", "Aneurisma"]:
        resolver_o_crear_patologia(session, nombre)
    session.commit()

    resultados = buscar_patologias(session, "esten")
    assert [r.nombre_patologia for r in resultados] == ["ESTENOSIS", "ESTENOSIS SEVERA"]


def test_busqueda_limitada_a_diez(session):
    for i in range(12):
        resolver_o_crear_patologia(session, f"Oclusión {i:02d}")
    session.commit()

    assert len(buscar_patologias(session, "oclus")) == 10


def test_comodines_se_buscan_literalmente(session):
    resolver_o_crear_patologia(session, "Estenosis")
    resolver_o_crear_patologia(session, "Flujo 50%")
    session.commit()

    assert [r.nombre_patologia for r in buscar_patologias(session, "%")] == ["FLUJO 50%"]
    assert buscar_patologias(session, "_") == []


@pytest.mark.parametrize("texto", ["oclusión", "OCLUSIÓN", "Oclusión", "sión"])
def test_busqueda_con_acentos(session, texto):
    id_patologia = resolver_o_crear_patologia(session, "Oclusión")
    resolver_o_crear_patologia(session, "Estenosis")
    session.commit()

    resultados = buscar_patologias(session, texto)
    assert [(r.id_patologia, r.nombre_patologia) for r in resultados] == [
        (id_patologia, "OCLUSIÓN")
    ]


def test_nombre_con_acentos_se_reutiliza(session):
    primero = resolver_o_crear_patologia(session, "disección")
    segundo = resolver_o_crear_patologia(session, "DISECCIÓN ")
    assert primero == segundo

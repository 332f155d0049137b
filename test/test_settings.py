import logging

from utils.settings import CLAVE_POR_DEFECTO, Settings, advertir_clave_por_defecto


def test_advierte_clave_por_defecto(caplog):
    with caplog.at_level(logging.WARNING):
        assert advertir_clave_por_defecto(Settings(secret_key=CLAVE_POR_DEFECTO))
    assert "SECRET_KEY no está configurada" in caplog.text


def test_sin_advertencia_con_clave_propia(caplog):
    with caplog.at_level(logging.WARNING):
        assert not advertir_clave_por_defecto(Settings(secret_key="otra-clave"))
    assert "SECRET_KEY" not in caplog.text


def test_url_de_base_de_datos():
    config = Settings(
        db_url=None,
        db_username="u",
        db_password="p",
        db_host="db",
        db_port=5433,
        db_name="catalogo",
    )
    assert config.database_url == "postgresql+psycopg://u:p@db:5433/catalogo"
    assert Settings(db_url="sqlite://").database_url == "sqlite://"

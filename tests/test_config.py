"""
Tests for settings, logging setup, the database handle and the init script.
"""
import logging

import pytest
from sqlalchemy import inspect

from pkgregistry.cli.init_db import main
from pkgregistry.core.config import Settings
from pkgregistry.core.database import Database, create_database
from pkgregistry.utils.logger import setup_logging


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///env.db")
    monkeypatch.setenv("PAGINATED_AMOUNT", "5")
    monkeypatch.setenv("GITHUB_TIMEOUT", "3")

    config = Settings()

    assert config.database_url == "sqlite:///env.db"
    assert config.paginated_amount == 5
    assert config.github_timeout == 3


def test_settings_defaults(monkeypatch):
    for key in ("PAGINATED_AMOUNT", "GITHUB_API_URL", "SQL_ECHO"):
        monkeypatch.delenv(key, raising=False)

    config = Settings(_env_file=None)

    assert config.paginated_amount == 30
    assert config.github_api_url == "https://api.github.com"
    assert config.sql_echo is False


def test_logging_variables_belong_to_logger_only(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("LOG_LEVEL=2\nLOG_FILE=registry.log\nPAGINATED_AMOUNT=7\n")

    config = Settings(_env_file=str(env_file))

    assert config.paginated_amount == 7
    assert not hasattr(config, "log_level")


@pytest.mark.parametrize("env_level,expected", [
    ("1", logging.INFO),
    ("2", logging.DEBUG),
    ("0", logging.CRITICAL + 10),
    ("junk", logging.CRITICAL + 10),
])
def test_setup_logging_levels(monkeypatch, clean_root_logger, env_level, expected):
    monkeypatch.setenv("LOG_LEVEL", env_level)
    monkeypatch.delenv("LOG_FILE", raising=False)

    setup_logging()

    assert clean_root_logger.level == expected


def test_setup_logging_to_file(monkeypatch, clean_root_logger, tmp_path):
    log_file = tmp_path / "registry.log"
    monkeypatch.setenv("LOG_LEVEL", "1")
    monkeypatch.setenv("LOG_FILE", str(log_file))

    setup_logging()
    logging.getLogger("pkgregistry.test").info("hello registry")
    for handler in clean_root_logger.handlers:
        handler.flush()

    assert "hello registry" in log_file.read_text()


def test_database_session_rolls_back_on_error(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'handle.db'}")
    database.init_db()
    try:
        from pkgregistry.core.models import User

        with pytest.raises(RuntimeError):
            with database.session() as db:
                db.add(User(username="ghost", node_id="ghost-node"))
                db.flush()
                raise RuntimeError("abort")

        with database.session() as db:
            assert db.query(User).count() == 0
    finally:
        database.dispose()


def test_create_database_from_settings(tmp_path):
    config = Settings(_env_file=None, database_url=f"sqlite:///{tmp_path / 'configured.db'}")
    database = create_database(config)
    try:
        database.init_db()
        tables = set(inspect(database.engine).get_table_names())
        assert {"packages", "names", "versions", "users", "stars"} <= tables
    finally:
        database.dispose()


def test_init_db_script(tmp_path, monkeypatch, clean_root_logger):
    monkeypatch.setenv("LOG_LEVEL", "0")
    url = f"sqlite:///{tmp_path / 'script.db'}"

    assert main(["--database-url", url, "--audit-stars"]) == 0

    database = Database(url)
    try:
        assert "packages" in inspect(database.engine).get_table_names()
    finally:
        database.dispose()

import json
import logging

import pytest

import manage
from core.config import get_settings
from database import dispose_engine


@pytest.fixture
def tmp_database(tmp_path, monkeypatch):
    # manage.main reconfigures logging onto the captured stdout
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'manage.db'}")
    get_settings.cache_clear()
    dispose_engine()
    yield tmp_path / "manage.db"
    dispose_engine()
    get_settings.cache_clear()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_recreate_table_requires_confirmation(tmp_database, capsys):
    assert manage.main(["recreate-table"]) == 2
    assert "--yes" in capsys.readouterr().err
    assert not tmp_database.exists()


def test_init_db_then_reset_sequence(tmp_database, capsys):
    assert manage.main(["init-db"]) == 0
    assert tmp_database.exists()

    assert manage.main(["reset-sequence"]) == 0

    payloads = []
    for line in capsys.readouterr().out.splitlines():
        try:
            parsed = json.loads(line)
        except ValueError:
            continue
        if "totalCourses" in parsed:
            payloads.append(parsed)
    assert payloads == [{"totalCourses": 0, "nextId": 1}]


def test_recreate_table_with_confirmation(tmp_database):
    assert manage.main(["init-db"]) == 0
    assert manage.main(["recreate-table", "--yes"]) == 0

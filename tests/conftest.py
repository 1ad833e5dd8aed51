# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import pytest

from billing_import.logging.init import reset_logging
from tests.builders import FakeCursor, target_table


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """table_prefix: Vnpt_
schema: public
page_size: 2
currency_suffix: đồng
logs_dir: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: billing
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def fake_execute_values(monkeypatch):
    """Route execute_values into FakeCursor.tables."""
    import billing_import.db.batch_insert as bi

    calls: list[tuple[Any, list[list[Any]], int]] = []

    def fake(cursor, query, rows, page_size=100, template=None):
        calls.append((query, [list(r) for r in rows], page_size))
        if getattr(cursor, "insert_error", None) is not None:
            raise cursor.insert_error
        table = target_table(query)
        if hasattr(cursor, "tables"):
            cursor.tables[table].extend(list(r) for r in rows)

    monkeypatch.setattr(bi, "execute_values", fake)
    return calls


@pytest.fixture()
def fake_cursor(fake_execute_values) -> FakeCursor:
    return FakeCursor()


@pytest.fixture()
def cursor_factory(fake_execute_values):
    """``FakeCursor`` constructor for tests that need non-default behaviour."""
    return FakeCursor

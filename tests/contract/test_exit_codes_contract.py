from __future__ import annotations

from pathlib import Path

from billing_import.cli import main as cli_main
from billing_import.cli.__main__ import EXIT_FATAL, EXIT_REJECTED, EXIT_SUCCESS
from tests.builders import HEADER_LABELS, billing_row, make_xlsx


def test_exit_code_values():
    assert (EXIT_SUCCESS, EXIT_FATAL, EXIT_REJECTED) == (0, 1, 2)


def test_exit_codes_by_outcome(write_config, temp_workdir: Path, monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    good = make_xlsx(temp_workdir / "data" / "good.xlsx", [HEADER_LABELS, billing_row()])
    empty = make_xlsx(temp_workdir / "data" / "empty.xlsx", [HEADER_LABELS, [""] * len(HEADER_LABELS)])

    assert cli_main(["import", str(good), "--table", "Good"]) == EXIT_SUCCESS
    assert cli_main(["import", str(empty), "--table", "Empty"]) == EXIT_REJECTED
    assert cli_main(["import", str(temp_workdir / "nope.xlsx"), "--table", "Nope"]) == EXIT_FATAL

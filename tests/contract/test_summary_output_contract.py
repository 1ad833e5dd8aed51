from __future__ import annotations

import re
from pathlib import Path

from billing_import.cli import main as cli_main
from tests.builders import HEADER_LABELS, billing_row, make_xlsx

SUMMARY_RE = re.compile(
    r"^SUMMARY source=\S+ table=\S+ status=(persisted|rejected) rows=\d+ reasons=\d+ "
    r"elapsed_sec=[0-9.]+( dry_run=1)?$"
)


def test_summary_line_format(write_config, temp_workdir: Path, monkeypatch, capsys):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    path = make_xlsx(temp_workdir / "data" / "thang10.xlsx", [HEADER_LABELS, billing_row()])
    cli_main(["import", str(path), "--table", "Thang10"])
    summary = [line for line in capsys.readouterr().out.splitlines() if line.startswith("SUMMARY")]
    assert len(summary) == 1
    assert SUMMARY_RE.match(summary[0])

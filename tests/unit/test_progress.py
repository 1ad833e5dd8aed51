from __future__ import annotations

from unittest.mock import MagicMock

import billing_import.services.progress as progress_mod
from billing_import.services.progress import InsertProgress


def test_no_bar_without_tty(monkeypatch):
    monkeypatch.setattr(progress_mod, "is_tty_enabled", lambda: False)
    with InsertProgress(10) as progress:
        progress.advance(4)
        progress.advance(6)
        assert progress.pbar is None
    assert progress.done == 10


def test_bar_on_tty(monkeypatch):
    fake_bar = MagicMock()
    monkeypatch.setattr(progress_mod, "is_tty_enabled", lambda: True)
    monkeypatch.setattr(progress_mod, "tqdm", MagicMock(return_value=fake_bar))
    with InsertProgress(5, description="Inserting Vnpt_a") as progress:
        progress.advance(5)
    progress_mod.tqdm.assert_called_once()
    assert progress_mod.tqdm.call_args.kwargs["total"] == 5
    assert progress_mod.tqdm.call_args.kwargs["desc"] == "Inserting Vnpt_a"
    fake_bar.update.assert_called_once_with(5)
    fake_bar.close.assert_called_once()
    assert progress.pbar is None

from __future__ import annotations

from pathlib import Path

import pytest

from edit_timer import paths


def test_data_dir_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "data"
    monkeypatch.setenv(paths.DATA_DIR_ENV, str(target))

    assert paths.get_data_dir() == target
    assert target.is_dir()
    assert paths.get_db_path() == target / "state.sqlite3"
    assert paths.get_log_path().parent == target

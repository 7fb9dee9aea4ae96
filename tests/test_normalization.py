from __future__ import annotations

import pytest

from edit_timer.normalization import normalize_fs_path


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("", None),
        ("   ", None),
        (" /work/a.py\n", "/work/a.py"),
        ("C:\\Work\\A.py", "C:\\Work\\A.py"),
    ],
)
def test_normalize_fs_path(value, expected) -> None:
    assert normalize_fs_path(value) == expected

"""Test module for termpix.utils."""

from __future__ import annotations

from termpix.utils import dict_merge


def test_dict_merge() -> None:
    """Test dict_merge."""
    target_dict = {"a": 1, "b": {"c": 2, "d": 3}, "e": [1, 2]}
    input_dict = {"b": {"c": 4}, "e": [3, 4], "f": 5}

    dict_merge(target_dict, input_dict)
    assert target_dict == {"a": 1, "b": {"c": 4, "d": 3}, "e": [1, 2, 3, 4], "f": 5}

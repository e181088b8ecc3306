"""
Unit Tests for File Locking

Tests for the portalocker-backed JSON helpers.
"""

import json

from icon_toolkit.common.file_locking import locked_read_json, locked_read_modify_write_json


class TestLockedJson:
    """Tests for JSON read / read-modify-write."""

    def test_read_when_missing_then_default(self, tmp_path):
        assert locked_read_json(tmp_path / "missing.json", default=lambda: {"a": 1}) == {"a": 1}

    def test_read_when_missing_then_no_file_created(self, tmp_path):
        path = tmp_path / "missing.json"

        locked_read_json(path)

        assert not path.exists()

    def test_read_when_empty_file_then_default(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("", encoding="utf-8")

        assert locked_read_json(path) == {}

    def test_modify_when_missing_then_starts_from_default(self, tmp_path):
        path = tmp_path / "nested" / "state.json"

        def add(data):
            data.setdefault("ids", []).append("1:2")
            return data

        result = locked_read_modify_write_json(path, add, default=lambda: {"ids": []})

        assert result == {"ids": ["1:2"]}
        assert json.loads(path.read_text(encoding="utf-8")) == {"ids": ["1:2"]}

    def test_modify_when_called_twice_then_accumulates(self, tmp_path):
        path = tmp_path / "state.json"

        def bump(data):
            data["count"] = data.get("count", 0) + 1
            return data

        locked_read_modify_write_json(path, bump)
        locked_read_modify_write_json(path, bump)

        assert locked_read_json(path) == {"count": 2}

    def test_modify_when_result_shorter_then_no_trailing_bytes(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"ids": ["1:1", "1:2", "1:3"]}), encoding="utf-8")

        locked_read_modify_write_json(path, lambda data: {"ids": []})

        assert locked_read_json(path) == {"ids": []}

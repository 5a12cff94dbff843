"""
Tests for the JSON backend used by serializers.
"""

from safesign import json_utils


class TestJsonUtils:
    """Test JSON serialization helpers."""

    def test_backend_name(self):
        assert json_utils.get_json_backend() in ("orjson", "builtin")

    def test_compact_output(self):
        assert json_utils.dumps([1, 2, 3]) == "[1,2,3]"
        assert json_utils.dumps({"a": 1, "b": [True, None]}) == '{"a":1,"b":[true,null]}'

    def test_returns_str(self):
        assert isinstance(json_utils.dumps({"a": 1}), str)

    def test_sort_keys(self):
        assert json_utils.dumps({"b": 1, "a": 2}, sort_keys=True) == '{"a":2,"b":1}'

    def test_unicode_not_escaped(self):
        assert json_utils.dumps("é") == '"é"'

    def test_loads_str_and_bytes(self):
        assert json_utils.loads('{"a":[1,2]}') == {"a": [1, 2]}
        assert json_utils.loads(b"[1]") == [1]

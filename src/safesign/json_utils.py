"""
JSON Utilities
==============

Serializes payloads with orjson when available, falling back to the built-in
json library. Both backends emit compact JSON (no whitespace after ``,`` and
``:``), so the signed text of a value is identical whichever backend produced it.
"""

import logging
from typing import Any, Union

logger = logging.getLogger(__name__)

try:
    import orjson

    def dumps(obj: Any, sort_keys: bool = False) -> str:
        """
        Serialize object to a compact JSON string using orjson.

        Args:
            obj: Object to serialize
            sort_keys: Whether to sort dictionary keys

        Returns:
            JSON string
        """
        option = orjson.OPT_SORT_KEYS if sort_keys else 0
        # orjson returns bytes, decode to string for signing
        return orjson.dumps(obj, option=option).decode("utf-8")

    def loads(s: Union[str, bytes]) -> Any:
        """Deserialize a JSON string or bytes using orjson."""
        return orjson.loads(s)

    JSON_BACKEND = "orjson"
    logger.debug("Using orjson for JSON payloads")

except ImportError:
    import json

    def dumps(obj: Any, sort_keys: bool = False) -> str:
        """Serialize object to a compact JSON string using built-in json."""
        return json.dumps(
            obj, sort_keys=sort_keys, separators=(",", ":"), ensure_ascii=False
        )

    def loads(s: Union[str, bytes]) -> Any:
        """Deserialize a JSON string using built-in json."""
        return json.loads(s)

    JSON_BACKEND = "builtin"
    logger.debug("Using built-in json library for JSON payloads")


def get_json_backend() -> str:
    """Get the currently active JSON backend name."""
    return JSON_BACKEND

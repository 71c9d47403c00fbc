from typing import cast

import orjson


def load_json(json_str: str | bytes) -> object:
    """Parse a JSON document.

    Args:
        json_str: The JSON text to parse.

    Returns:
        The parsed JSON value.

    Raises:
        orjson.JSONDecodeError: If the text is not valid JSON.
    """
    return cast("object", orjson.loads(json_str))


def dump_json(value: object, *, indent: bool = False) -> str:
    """Serialize a value to a JSON string.

    Args:
        value: The value to serialize.
        indent: Pretty-print with two-space indentation.

    Returns:
        The JSON text.
    """
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(value, option=option).decode()

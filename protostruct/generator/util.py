"""Identifier casing helpers."""

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_pascal_case(name: str, delimiter: str = "_") -> str:
    """Convert a delimiter-separated identifier to PascalCase.

    The first character of the input and every character following a
    delimiter is upper-cased, all other characters are lower-cased and the
    delimiters are dropped: "HTTP_code" becomes "HttpCode".
    """
    result: list[str] = []
    next_upper = True
    for c in name:
        if c == delimiter:
            next_upper = True
        elif next_upper:
            result.append(c.upper())
            next_upper = False
        else:
            result.append(c.lower())
    return "".join(result)


def to_snake_case(name: str) -> str:
    """Convert a PascalCase or camelCase identifier to snake_case."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_upper_camel_case(name: str) -> str:
    """Convert a field name the way protoc's C++ generator does for oneof case constants.

    Existing capitals are kept, and letters following an underscore or a
    digit are upper-cased: "value2d" becomes "Value2D".
    """
    result: list[str] = []
    next_upper = True
    for c in name:
        if "a" <= c <= "z":
            result.append(c.upper() if next_upper else c)
            next_upper = False
        elif "A" <= c <= "Z":
            result.append(c)
            next_upper = False
        elif "0" <= c <= "9":
            result.append(c)
            next_upper = True
        else:
            next_upper = True
    return "".join(result)

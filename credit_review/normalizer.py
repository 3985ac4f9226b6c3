import re
from typing import Any, Union


_EMPTY_CELLS = ("", "-", " ")
_EDGE_NOISE = re.compile(r"^[\"'\s]+|[\"'\s]+$")
_INNER_NOISE = re.compile(r"[\s,]")
_FLOAT_TEXT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_value(value: Any) -> Union[int, float, str]:
    """Coerce one spreadsheet cell to a number, falling back to its text.

    Blank-looking cells become 0, percentages are scaled to fractions and
    anything that still is not numeric comes back as the trimmed string.
    """
    if value is None or (isinstance(value, str) and value in _EMPTY_CELLS):
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value

    text = str(value).strip()
    cleaned = _INNER_NOISE.sub("", _EDGE_NOISE.sub("", text))

    if "%" in cleaned:
        number = _parse_float(cleaned.replace("%", "", 1))
        return 0 if number is None else number / 100

    number = _parse_float(cleaned)
    return text if number is None else number


def _parse_float(text: str):
    if not _FLOAT_TEXT.fullmatch(text):
        return None
    return float(text)

"""JSON object boundary scanning.

Hides how an embedded JSON object is located inside free text. The scanner
tracks brace depth and skips string literals, so braces inside quoted
values or nested objects never end the payload early.
"""

from dataclasses import dataclass


class ReplyDecodeError(Exception):
    """Base class for payload decoding failures."""


class UnbalancedPayloadError(ReplyDecodeError):
    """An opening brace was never closed."""

    def __init__(self, start: int):
        super().__init__(f"Unbalanced JSON object starting at offset {start}")
        self.start = start


class PayloadParseError(ReplyDecodeError):
    """The extracted text is not a JSON object."""


@dataclass(frozen=True)
class JsonSpan:
    """Half-open ``[start, end)`` span of a JSON object within a string."""

    start: int
    end: int

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


def scan_json_object(text: str, start: int = 0) -> JsonSpan | None:
    """Find the first balanced ``{...}`` object at or after ``start``.

    Args:
        text: Text to scan
        start: Offset to begin scanning from

    Returns:
        Span of the object, or None if the text has no opening brace

    Raises:
        UnbalancedPayloadError: If the first object is never closed
    """
    open_at = text.find("{", start)
    if open_at == -1:
        return None

    depth = 0
    in_string = False
    escaped = False

    for index in range(open_at, len(text)):
        char = text[index]

        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return JsonSpan(open_at, index + 1)

    raise UnbalancedPayloadError(open_at)

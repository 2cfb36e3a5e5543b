"""Reply decoding.

Splits an assistant reply into human-readable prose and the structured
payload the assistant embeds after a sentinel marker::

    Here is your deck.
    &&json
    ```json
    {"slides": [...], "excel": {...}}
    ```

Hidden design decisions:
- Sentinel first; brace scanning on the whole reply only when no sentinel
  is present, and only for objects that carry ``slides`` or ``excel``
- Fail-closed on a broken payload unless ``fail_open`` is requested
- Per-item validation so one malformed slide item never sinks the reply
"""

import json
import logging
import re
from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import ValidationError

from .models import (
    ChartSeries,
    ChatMessage,
    DecodedReply,
    DecodeStrategy,
    MessageRole,
    SlideItem,
    SlideSpec,
    SpreadsheetSpec,
)
from .scanner import PayloadParseError, ReplyDecodeError, scan_json_object

logger = logging.getLogger(__name__)

PAYLOAD_SENTINEL = "&&json"

_SLIDES_KEY = "slides"
_EXCEL_KEY = "excel"
_FENCE_MARKERS = ("```", "'''")
_OPENING_FENCE = re.compile(r"(```|''')[ \t]*(json)?\s*$", re.IGNORECASE)
_JSON_FENCE = re.compile(r"(```|''')[ \t]*json\s*$", re.IGNORECASE)


def _load_object(text: str) -> dict[str, Any]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise PayloadParseError(f"Invalid JSON payload: {e}") from e
    if not isinstance(payload, dict):
        raise PayloadParseError(
            f"Payload must be a JSON object, got {type(payload).__name__}"
        )
    return payload


def _has_fence(text: str) -> bool:
    return any(marker in text for marker in _FENCE_MARKERS)


def _close_fence(text: str, opened: bool) -> str:
    """Drop the fence closing the payload block.

    Only done when an opening fence was consumed; otherwise a fence after
    the payload starts a code block of the prose.
    """
    if not opened:
        return text
    stripped = text.lstrip()
    for marker in _FENCE_MARKERS:
        if stripped.startswith(marker):
            return stripped[len(marker):]
    return text


def _parse_series(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    series = []
    for entry in raw:
        try:
            series.append(ChartSeries.model_validate(entry).model_dump())
        except ValidationError:
            logger.warning("Dropping chart series without values: %r", entry)
    return series


def _parse_slide(raw: Any, slide_number: int) -> SlideSpec | None:
    if not isinstance(raw, dict):
        logger.warning("Dropping slide %d: expected an object", slide_number)
        return None

    items = raw.get("data") or []
    if not isinstance(items, list):
        logger.warning("Slide %d has no item list", slide_number)
        items = []

    parsed: list[SlideItem] = []
    for raw_item in items:
        if not isinstance(raw_item, dict):
            logger.warning("Dropping non-object item on slide %d", slide_number)
            continue
        item = dict(raw_item)
        series = item.pop("chatData", None)
        series = item.pop("chartData", series)
        item["chartData"] = _parse_series(series)
        try:
            parsed.append(SlideItem.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "Dropping item of type %r on slide %d: %s",
                raw_item.get("type"),
                slide_number,
                e.errors()[0].get("msg", "invalid"),
            )
    return SlideSpec(data=parsed)


def _parse_slides(raw: Any) -> list[SlideSpec] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        logger.warning("Ignoring 'slides': expected a list, got %s", type(raw).__name__)
        return None
    slides = []
    for number, entry in enumerate(raw, 1):
        slide = _parse_slide(entry, number)
        if slide is not None:
            slides.append(slide)
    return slides


def _parse_spreadsheet(raw: Any) -> SpreadsheetSpec | None:
    if not isinstance(raw, dict) or not raw.get("data"):
        if raw is not None:
            logger.warning("Ignoring 'excel': no data rows")
        return None
    data = raw["data"]
    if not isinstance(data, list):
        logger.warning("Ignoring 'excel': data must be a list of rows")
        return None
    rows = [row for row in data if isinstance(row, list)]
    if len(rows) != len(data):
        logger.warning("Dropped %d non-list spreadsheet rows", len(data) - len(rows))
    try:
        return SpreadsheetSpec.model_validate({**raw, "data": rows})
    except ValidationError as e:
        logger.warning("Ignoring 'excel': %s", e.errors()[0].get("msg", "invalid"))
        return None


class ReplyDecoder:
    """Decodes chat messages into prose and artifacts.

    Decoding is pure: the same message always yields an equal
    ``DecodedReply`` and the message itself is never modified.

    Example:
        decoder = ReplyDecoder()
        reply = decoder.decode(message)
        if reply.is_displayable and reply.has_slides:
            ...
    """

    def __init__(
        self,
        sentinel: str = PAYLOAD_SENTINEL,
        brace_fallback: bool = True,
        fail_open: bool = False,
    ):
        """Initialize the decoder.

        Args:
            sentinel: Marker separating prose from the payload
            brace_fallback: Scan sentinel-less replies for a payload object
            fail_open: On a broken payload, keep the raw content as prose
                instead of suppressing the message
        """
        if not sentinel:
            raise ValueError("Sentinel must be a non-empty string")
        self._sentinel = sentinel
        self._brace_fallback = brace_fallback
        self._fail_open = fail_open

    @property
    def sentinel(self) -> str:
        return self._sentinel

    def decode(self, message: ChatMessage | str) -> DecodedReply:
        """Decode one message.

        Plain strings are treated as assistant content.
        """
        if isinstance(message, str):
            message = ChatMessage(role=MessageRole.ASSISTANT, content=message)

        content = message.content
        if not message.is_assistant:
            return DecodedReply(prose=content)

        marker = content.find(self._sentinel)
        if marker != -1:
            try:
                return self._decode_at_sentinel(content, marker)
            except ReplyDecodeError as e:
                logger.warning("Reply payload could not be decoded: %s", e)
                return self._failure(content)

        if self._brace_fallback and "{" in content and "}" in content:
            reply = self._decode_fallback(content)
            if reply is not None:
                return reply

        return DecodedReply(prose=content)

    def _decode_at_sentinel(self, content: str, marker: int) -> DecodedReply:
        before, fences = _JSON_FENCE.subn("", content[:marker])
        remainder = content[marker + len(self._sentinel):]

        span = scan_json_object(remainder)
        if span is None:
            raise PayloadParseError("No JSON object follows the payload marker")

        payload = _load_object(span.slice(remainder))
        opened = fences > 0 or _has_fence(remainder[:span.start])
        after = _close_fence(remainder[span.end:], opened)

        return DecodedReply(
            prose=before + after,
            slides=_parse_slides(payload.get(_SLIDES_KEY)),
            spreadsheet=_parse_spreadsheet(payload.get(_EXCEL_KEY)),
            strategy=DecodeStrategy.SENTINEL,
        )

    def _decode_fallback(self, content: str) -> DecodedReply | None:
        try:
            span = scan_json_object(content)
            if span is None:
                return None
            payload = _load_object(span.slice(content))
        except ReplyDecodeError:
            return None

        if _SLIDES_KEY not in payload and _EXCEL_KEY not in payload:
            return None

        logger.debug("Found payload without marker at offset %d", span.start)
        before, fences = _OPENING_FENCE.subn("", content[:span.start])
        after = _close_fence(content[span.end:], fences > 0)
        return DecodedReply(
            prose=before + after,
            slides=_parse_slides(payload.get(_SLIDES_KEY)),
            spreadsheet=_parse_spreadsheet(payload.get(_EXCEL_KEY)),
            strategy=DecodeStrategy.BRACE_FALLBACK,
        )

    def _failure(self, content: str) -> DecodedReply:
        return DecodedReply(
            prose=content if self._fail_open else "",
            decode_error=True,
            strategy=DecodeStrategy.SENTINEL,
        )


_default_decoder = ReplyDecoder()


def decode_reply(message: ChatMessage | str) -> DecodedReply:
    """Decode a message with the default decoder settings."""
    return _default_decoder.decode(message)


def visible_messages(
    messages: Iterable[ChatMessage],
) -> Iterator[tuple[ChatMessage, bool]]:
    """Yield renderable messages with an attachment flag.

    File placeholders are never rendered themselves; the message that
    follows one is flagged as carrying an attachment.
    """
    previous: ChatMessage | None = None
    for message in messages:
        if not message.is_attachment:
            yield message, previous is not None and previous.is_attachment
        previous = message

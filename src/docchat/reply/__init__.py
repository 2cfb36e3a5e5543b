"""Reply decoding module for docchat.

Turns raw assistant replies into prose plus slide and spreadsheet artifacts.
"""

from .decoder import PAYLOAD_SENTINEL, ReplyDecoder, decode_reply, visible_messages
from .models import (
    ChartSeries,
    ChatMessage,
    ContentType,
    DecodedReply,
    DecodeStrategy,
    MessageRole,
    SlideItem,
    SlideItemKind,
    SlideSpec,
    SpreadsheetSpec,
    cell_value,
)
from .scanner import (
    JsonSpan,
    PayloadParseError,
    ReplyDecodeError,
    UnbalancedPayloadError,
    scan_json_object,
)

__all__ = [
    "PAYLOAD_SENTINEL",
    "ChartSeries",
    "ChatMessage",
    "ContentType",
    "DecodeStrategy",
    "DecodedReply",
    "JsonSpan",
    "MessageRole",
    "PayloadParseError",
    "ReplyDecodeError",
    "ReplyDecoder",
    "SlideItem",
    "SlideItemKind",
    "SlideSpec",
    "SpreadsheetSpec",
    "UnbalancedPayloadError",
    "cell_value",
    "decode_reply",
    "scan_json_object",
    "visible_messages",
]

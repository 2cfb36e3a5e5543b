"""
DocChat: terminal client for chatting with reference documents.

Assistant replies may carry slide decks and spreadsheets after a payload
marker; docchat splits them from the prose and exports them.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .reply import DecodedReply, ReplyDecoder, decode_reply

__all__ = [
    "DecodedReply",
    "ReplyDecoder",
    "decode_reply",
]

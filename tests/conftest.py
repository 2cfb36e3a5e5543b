"""Pytest configuration and shared fixtures."""
import json

import httpx
import pytest

from docchat.client import ChatApiClient, ClientConfig
from docchat.reply import ReplyDecoder

TEST_BASE_URL = "http://docchat.test"


@pytest.fixture
def decoder():
    """Return a decoder with default settings."""
    return ReplyDecoder()


@pytest.fixture
def slides_payload():
    """Return a payload with one text slide and one chart slide."""
    return {
        "slides": [
            {
                "data": [
                    {
                        "type": "Text",
                        "value": "Quarterly results",
                        "options": {"x": 0.5, "y": 0.4, "w": 9, "h": 1, "fontSize": 28, "bold": True},
                    },
                ]
            },
            {
                "data": [
                    {
                        "type": "Chart",
                        "value": "bar",
                        "options": {"x": 1, "y": 1, "w": 8, "h": 4},
                        "chatData": [
                            {"name": "Revenue", "labels": ["Q1", "Q2"], "values": [10, 12]},
                        ],
                    },
                ]
            },
        ]
    }


@pytest.fixture
def excel_payload():
    """Return a payload with a two-column spreadsheet."""
    return {
        "excel": {
            "columnLabels": ["Name", "Score"],
            "rowLabels": ["1", "2"],
            "data": [
                [{"value": "Ada"}, {"value": 91}],
                [{"value": "Linus"}, {"value": 78}],
            ],
        }
    }


@pytest.fixture
def payload_reply(slides_payload, excel_payload):
    """Return assistant content embedding both artifacts after the sentinel."""
    payload = {**slides_payload, **excel_payload}
    return (
        "Here is the summary you asked for.\n"
        "&&json\n"
        "```json\n"
        f"{json.dumps(payload)}\n"
        "```\n"
        "Let me know if you need changes."
    )


@pytest.fixture
def make_client():
    """Return a factory building a ChatApiClient on a mock transport.

    The handler receives each httpx.Request and returns an httpx.Response.
    """
    def _make(handler, **config):
        transport = httpx.MockTransport(handler)
        return ChatApiClient(ClientConfig(base_url=TEST_BASE_URL, **config), transport=transport)

    return _make

"""Tests for the InteractionGate state machine."""

from __future__ import annotations

import json

import pytest

from discord_interactions.gate.body import BodySource
from discord_interactions.gate.gate import (
    GateResponse,
    InteractionGate,
    extract_headers,
    is_ping,
    parse_interaction,
)
from discord_interactions.protocol.crypto import generate_keypair
from discord_interactions.protocol.errors import (
    ConfigurationError,
    InvalidHeadersError,
    InvalidPayloadError,
)
from discord_interactions.protocol.types import SIGNATURE_HEADER, TIMESTAMP_HEADER


async def _stream(body: bytes, chunk_size: int | None = None):
    if chunk_size is None:
        yield body
        return
    for i in range(0, len(body), chunk_size):
        yield body[i:i + chunk_size]


async def _untouchable():
    raise AssertionError("body must not be read")
    yield b""  # pragma: no cover


@pytest.fixture()
def gate(public_key_hex) -> InteractionGate:
    return InteractionGate(public_key_hex)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    @pytest.mark.parametrize("key", [None, "", b""])
    def test_missing_key_raises(self, key):
        with pytest.raises(ConfigurationError, match="public key"):
            InteractionGate(key)

    def test_malformed_key_raises(self):
        with pytest.raises(ConfigurationError):
            InteractionGate("abc123")

    def test_accepts_bytes_and_verify_key(self, keypair):
        _, vk = keypair
        assert InteractionGate(vk.encode()).verify_key == vk
        assert InteractionGate(vk).verify_key == vk


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestExtractHeaders:
    def test_case_insensitive(self):
        sig, ts = extract_headers(
            {"x-signature-ed25519": "aa", "X-SIGNATURE-TIMESTAMP": "1"}
        )
        assert (sig, ts) == ("aa", "1")

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {SIGNATURE_HEADER: "aa"},
            {TIMESTAMP_HEADER: "1"},
            {SIGNATURE_HEADER: "", TIMESTAMP_HEADER: "1"},
            {SIGNATURE_HEADER: "aa", TIMESTAMP_HEADER: ""},
        ],
    )
    def test_missing_or_empty_raises(self, headers):
        with pytest.raises(InvalidHeadersError):
            extract_headers(headers)


class TestParseInteraction:
    def test_object(self):
        assert parse_interaction(b'{"type":2,"id":"1"}') == {"type": 2, "id": "1"}

    @pytest.mark.parametrize("raw", [b"null", b"false", b"0", b"0.0", b'""'])
    def test_falsy_is_empty_payload(self, raw):
        assert parse_interaction(raw) == {}

    @pytest.mark.parametrize("raw", [b"", b"{", b"not json", b"\xff\xfe"])
    def test_malformed_raises(self, raw):
        with pytest.raises(InvalidPayloadError):
            parse_interaction(raw)

    @pytest.mark.parametrize(
        "raw, expected",
        [(b"[1,2]", [1, 2]), (b"[]", []), (b"{}", {}), (b"3", 3), (b'"ping"', "ping"), (b"true", True)],
    )
    def test_non_object_passes_through(self, raw, expected):
        assert parse_interaction(raw) == expected


class TestIsPing:
    def test_ping(self):
        assert is_ping({"type": 1}) is True

    @pytest.mark.parametrize("payload", [{}, {"type": 2}, {"type": "1"}, {"type": True}])
    def test_not_ping(self, payload):
        assert is_ping(payload) is False

    @pytest.mark.parametrize("payload", [[{"type": 1}], "ping", 1, True])
    def test_non_mapping_is_not_ping(self, payload):
        assert is_ping(payload) is False


class TestGateResponse:
    def test_pong_body(self):
        pong = GateResponse.pong()
        assert pong.status_code == 200
        assert pong.body == b'{"type":1}'
        assert pong.media_type == "application/json"


# ---------------------------------------------------------------------------
# process()
# ---------------------------------------------------------------------------

class TestProcess:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {SIGNATURE_HEADER: "00" * 64},
            {TIMESTAMP_HEADER: "1700000000"},
        ],
    )
    async def test_missing_headers_rejected_without_reading_body(self, gate, headers):
        result = await gate.process(headers, stream=_untouchable())
        assert result.accepted is False
        assert result.response.status_code == 401
        assert result.response.body == b"Invalid headers"
        assert result.raw_body is None

    @pytest.mark.asyncio
    async def test_ping_answered_with_pong(self, gate, sign_request):
        body, headers = sign_request({"type": 1})
        result = await gate.process(headers, stream=_stream(body))
        assert result.accepted is False
        assert result.response.status_code == 200
        assert result.response.media_type == "application/json"
        assert json.loads(result.response.body) == {"type": 1}

    @pytest.mark.asyncio
    async def test_command_passed_downstream_unchanged(self, gate, sign_request):
        payload = {"type": 2, "id": "123", "data": {"name": "hello", "options": [1, 2.5, None]}}
        body, headers = sign_request(payload)
        result = await gate.process(headers, stream=_stream(body))
        assert result.accepted is True
        assert result.response is None
        assert result.interaction == payload
        assert result.raw_body == body
        assert result.body_source is BodySource.STREAM

    @pytest.mark.asyncio
    async def test_invalid_signature_rejected(self, gate, sign_request):
        other_sk, _ = generate_keypair()
        body, headers = sign_request({"type": 1}, key=other_sk)
        result = await gate.process(headers, stream=_stream(body))
        assert result.accepted is False
        assert result.response.status_code == 401
        assert result.response.body == b"Invalid signature"

    @pytest.mark.asyncio
    async def test_signature_over_other_timestamp_rejected(self, gate, sign_request):
        body, headers = sign_request({"type": 1}, ts="1700000000")
        headers[TIMESTAMP_HEADER] = "1700000001"
        result = await gate.process(headers, stream=_stream(body))
        assert result.response.status_code == 401
        assert result.response.body == b"Invalid signature"

    @pytest.mark.asyncio
    async def test_garbage_signature_rejected_not_raised(self, gate, sign_request):
        body, headers = sign_request({"type": 1})
        headers[SIGNATURE_HEADER] = "definitely-not-hex"
        result = await gate.process(headers, stream=_stream(body))
        assert result.response.status_code == 401
        assert result.response.body == b"Invalid signature"

    @pytest.mark.asyncio
    async def test_chunk_boundaries_do_not_matter(self, gate, sign_request):
        body, headers = sign_request({"type": 2, "data": {"name": "ünïcode"}})
        whole = await gate.process(headers, stream=_stream(body))
        bytewise = await gate.process(headers, stream=_stream(body, chunk_size=1))
        assert whole.accepted is bytewise.accepted is True
        assert whole.raw_body == bytewise.raw_body == body

    @pytest.mark.asyncio
    async def test_materialized_bytes(self, gate, sign_request):
        body, headers = sign_request(b'{ "type": 2 }')
        result = await gate.process(headers, body=body)
        assert result.accepted is True
        assert result.body_source is BodySource.RAW

    @pytest.mark.asyncio
    async def test_materialized_text(self, gate, sign_request):
        body, headers = sign_request({"type": 2})
        result = await gate.process(headers, body=body.decode("utf-8"))
        assert result.accepted is True
        assert result.body_source is BodySource.TEXT

    @pytest.mark.asyncio
    async def test_materialized_object_matching_encoding(self, gate, sign_request):
        payload = {"type": 2, "data": {"name": "hello"}}
        _, headers = sign_request(payload)
        result = await gate.process(headers, body=dict(payload))
        assert result.accepted is True
        assert result.body_source is BodySource.PARSED

    @pytest.mark.asyncio
    async def test_materialized_object_with_different_encoding_fails(self, gate, sign_request):
        # Sender used spaces; re-serialization is compact and cannot match.
        body, headers = sign_request(b'{"type": 2}')
        result = await gate.process(headers, body=json.loads(body))
        assert result.accepted is False
        assert result.response.body == b"Invalid signature"

    @pytest.mark.asyncio
    async def test_malformed_json_after_valid_signature_is_400(self, gate, sign_request):
        body, headers = sign_request(b"{not json")
        result = await gate.process(headers, body=body)
        assert result.accepted is False
        assert result.response.status_code == 400
        assert result.response.body == b"Invalid payload"

    @pytest.mark.asyncio
    async def test_null_body_passes_downstream_as_empty(self, gate, sign_request):
        body, headers = sign_request(b"null")
        result = await gate.process(headers, body=body)
        assert result.accepted is True
        assert result.interaction == {}

    @pytest.mark.asyncio
    async def test_gate_is_reusable(self, gate, sign_request):
        body, headers = sign_request({"type": 2})
        first = await gate.process(headers, body=body)
        second = await gate.process(headers, body=body)
        assert first.accepted is second.accepted is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw, expected",
        [(b"false", {}), (b"0", {}), (b"[1,2]", [1, 2]), (b'"x"', "x"), (b"3", 3)],
    )
    async def test_non_object_bodies_pass_downstream(self, gate, sign_request, raw, expected):
        body, headers = sign_request(raw)
        result = await gate.process(headers, body=body)
        assert result.accepted is True
        assert result.response is None
        assert result.interaction == expected
        assert result.raw_body == body

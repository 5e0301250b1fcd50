import asyncio
import json
from datetime import datetime

import pytest

from conftest import MockLLM
from errors import ValidationError
from pipelines import AnswerSynthesizer
from server import create_tcp_server, parse_request


async def exchange(port: int, payload: bytes, close_write: bool = False) -> dict:
    reader, writer = await asyncio.open_connection("127.0.0.1", port)
    writer.write(payload)
    if close_write:
        writer.write_eof()
    await writer.drain()
    line = await asyncio.wait_for(reader.readline(), timeout=5)
    trailing = await asyncio.wait_for(reader.read(), timeout=5)
    writer.close()
    await writer.wait_closed()
    assert trailing == b""
    return json.loads(line)


@pytest.fixture
async def tcp_port(synthesizer: AnswerSynthesizer):
    server = await create_tcp_server(synthesizer, "127.0.0.1", 0)
    yield server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()


class TestLineProtocol:
    async def test_one_request_one_response(self, tcp_port: int) -> None:
        payload = {"text": "What is the dress code?", "userId": "parent-7", "targetLanguage": "en"}

        response = await exchange(tcp_port, json.dumps(payload).encode() + b"\n")

        assert response["response"] == "Mock chat response"
        assert response["translated"] == "Mock chat response"
        assert response["timestamp"].endswith("Z")
        datetime.fromisoformat(response["timestamp"].replace("Z", "+00:00"))

    async def test_request_terminated_by_eof(self, tcp_port: int) -> None:
        response = await exchange(tcp_port, b'{"text": "Lunch menu?"}', close_write=True)
        assert response["response"] == "Mock chat response"

    async def test_malformed_json(self, tcp_port: int) -> None:
        response = await exchange(tcp_port, b"not json\n")
        assert set(response) == {"error"}
        assert response["error"].startswith("Invalid request")

    async def test_missing_text(self, tcp_port: int) -> None:
        response = await exchange(tcp_port, b'{"userId": "p1"}\n')
        assert response == {"error": 'Invalid request: Field "text" is required'}

    async def test_pipeline_failure_reported(self, tcp_port: int, mock_llm: MockLLM) -> None:
        mock_llm.failures = 100
        response = await exchange(tcp_port, b'{"text": "hello"}\n')
        assert response["error"].startswith("Server error")


@pytest.mark.parametrize("raw", [b"[1, 2]", b'{"text": 5}', b"\xff\xfe"])
def test_parse_request_rejects(raw: bytes) -> None:
    with pytest.raises(ValidationError):
        parse_request(raw)


def test_parse_request_accepts_optional_fields() -> None:
    assert parse_request(b'{"text": "hi"}') == {"text": "hi"}

"""Line-oriented TCP front end.

Each connection carries exactly one request: the client writes a JSON
document ``{text, userId?, targetLanguage?}`` terminated by a newline (or
by closing its write side), the server writes one JSON line
``{response, translated, timestamp}`` or ``{error}`` and closes.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any

from errors import ValidationError
from pipelines import AnswerSynthesizer

logger = logging.getLogger(__name__)

MAX_REQUEST_BYTES = 64 * 1024


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_request(raw: bytes) -> dict[str, Any]:
    """Decode and validate one request payload.

    Raises:
        ValidationError: If the payload is not a JSON object with a non-empty "text".
    """
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Malformed JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ValidationError("Request must be a JSON object")
    text = payload.get("text")
    if not isinstance(text, str) or not text.strip():
        raise ValidationError('Field "text" is required')
    return payload


class LineProtocolHandler:
    """Serves one request per connection against an answer synthesizer."""

    def __init__(self, synthesizer: AnswerSynthesizer):
        self.synthesizer = synthesizer

    async def respond(self, raw: bytes) -> dict[str, Any]:
        try:
            payload = parse_request(raw)
        except ValidationError as e:
            return {"error": f"Invalid request: {e.message}"}

        logger.info(f"TCP request from user {payload.get('userId') or 'anonymous'}")
        try:
            result = await self.synthesizer.answer(
                payload["text"], payload.get("targetLanguage") or "en"
            )
        except Exception as e:
            logger.exception(f"Error processing TCP message: {e}")
            return {"error": f"Server error: {e}"}

        return {
            "response": result.answer,
            "translated": result.translated,
            "timestamp": utc_timestamp(),
        }

    async def __call__(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        try:
            try:
                raw = await reader.readline()
            except ValueError:
                response = {"error": "Invalid request: payload too large"}
            else:
                response = await self.respond(raw)
            writer.write((json.dumps(response) + "\n").encode("utf-8"))
            await writer.drain()
        except ConnectionError as e:
            logger.warning(f"TCP client disconnected: {e}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass


async def create_tcp_server(
    synthesizer: AnswerSynthesizer, host: str, port: int
) -> asyncio.AbstractServer:
    server = await asyncio.start_server(
        LineProtocolHandler(synthesizer), host, port, limit=MAX_REQUEST_BYTES
    )
    for sock in server.sockets:
        logger.info(f"TCP server listening on {sock.getsockname()}")
    return server

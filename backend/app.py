"""Serve the district assistant over HTTP and the TCP line protocol.

Both transports run in one asyncio event loop and share a single
AnswerSynthesizer (and therefore one embedding model and corpus store).
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import uvicorn

sys.path.insert(0, str(Path(__file__).parent / "src"))

from config import configure_logging, find_config_path, get_server_address, load_config
from pipelines import get_answer_synthesizer
from server import create_app, create_tcp_server

logger = logging.getLogger(__name__)


async def serve(config_path: Path) -> None:
    config = load_config(config_path)
    configure_logging(config)

    synthesizer = get_answer_synthesizer(config_path)
    host, http_port, tcp_port = get_server_address(config)

    tcp_server = await create_tcp_server(synthesizer, host, tcp_port)
    http_server = uvicorn.Server(
        uvicorn.Config(create_app(synthesizer), host=host, port=http_port, log_config=None)
    )
    logger.info(f"HTTP server running on {host}:{http_port}")

    async with tcp_server:
        await http_server.serve()


def main():
    parser = argparse.ArgumentParser(description="Run the district assistant servers")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.toml in project root)",
    )
    args = parser.parse_args()

    try:
        config_path = find_config_path(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    asyncio.run(serve(config_path))
    return 0


if __name__ == "__main__":
    sys.exit(main())

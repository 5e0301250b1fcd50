from .http_api import AskRequest, AskResponse, create_app
from .tcp_server import LineProtocolHandler, create_tcp_server, parse_request

__all__ = [
    "AskRequest",
    "AskResponse",
    "LineProtocolHandler",
    "create_app",
    "create_tcp_server",
    "parse_request",
]

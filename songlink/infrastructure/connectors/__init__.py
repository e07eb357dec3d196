"""Songlink API connector: transport and response conversion."""

from songlink.infrastructure.connectors.mapper import map_track, parse_document
from songlink.infrastructure.connectors.protocols import TransportProtocol
from songlink.infrastructure.connectors.transport import RequestsTransport

__all__ = [
    "RequestsTransport",
    "TransportProtocol",
    "map_track",
    "parse_document",
]

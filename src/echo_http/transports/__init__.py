"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: transports/__init__.py.
"""

from .contracts import Transport, TransportHandle
from .httpx_transport import HttpxTaskHandle, HttpxTransport

__all__ = [
    "Transport",
    "TransportHandle",
    "HttpxTransport",
    "HttpxTaskHandle",
]

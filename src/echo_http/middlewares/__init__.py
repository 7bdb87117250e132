"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Prebuilt middleware factories.
"""

from .observability import logging_middleware, timing_middleware
from .timeouts import timeout_middleware
from .urls import base_url_middleware, join_base_url
from .validation import response_model_middleware, status_check_middleware

__all__ = [
    "base_url_middleware",
    "join_base_url",
    "timeout_middleware",
    "timing_middleware",
    "logging_middleware",
    "status_check_middleware",
    "response_model_middleware",
]

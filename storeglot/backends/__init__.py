"""
Translation backends.

A backend wraps one machine-translation provider behind
`TranslationBackend.translate` and reports failures as `BackendError`.
"""

from storeglot.backends.base import EchoBackend, TranslationBackend, retrying
from storeglot.backends.errors import (
    BackendConfigurationError,
    BackendError,
    BackendErrorKind,
    is_transient,
)
from storeglot.backends.factory import BACKEND_NAMES, create_backend

__all__ = [
    "TranslationBackend",
    "EchoBackend",
    "retrying",
    "BackendError",
    "BackendErrorKind",
    "BackendConfigurationError",
    "is_transient",
    "BACKEND_NAMES",
    "create_backend",
]

"""Adapters — bindings for the network and the zic compiler.

Public re-exports for convenient access.
"""

from tzupdater.adapters.base import Compiler, Transport
from tzupdater.adapters.http.transport import UrllibTransport
from tzupdater.adapters.mock import MockCompiler, MockTransport
from tzupdater.adapters.shell.zic import ZicCompiler

__all__ = [
    "Compiler",
    "MockCompiler",
    "MockTransport",
    "Transport",
    "UrllibTransport",
    "ZicCompiler",
]

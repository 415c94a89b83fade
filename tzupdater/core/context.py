"""
Session context — the single holder of mutable state for one logical session.

Two slots live here and nowhere else:

    - latest:       release name scraped from the IANA website,
                    resolved at most once per context ("Unknown" included)
    - active_path:  compiled zoneinfo tree currently published as TZDIR

Every service receives the context explicitly, so tests build isolated
contexts (with mock adapters and a private environ dict) instead of
sharing process globals.

Not thread-safe: callers sharing a context across threads must lock.
"""

from __future__ import annotations

import os
from collections.abc import MutableMapping
from pathlib import Path

from tzupdater.adapters.base import Compiler, Transport
from tzupdater.core.models.settings import Settings

# Published location of the active compiled dataset
TZDIR_ENV = "TZDIR"


class SessionContext:
    """Settings, collaborators and the two session slots."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: Transport | None = None,
        compiler: Compiler | None = None,
        environ: MutableMapping[str, str] | None = None,
    ):
        if transport is None:
            from tzupdater.adapters.http.transport import UrllibTransport

            transport = UrllibTransport()
        if compiler is None:
            from tzupdater.adapters.shell.zic import ZicCompiler

            compiler = ZicCompiler()

        self.settings = settings or Settings()
        self.transport = transport
        self.compiler = compiler
        self.environ: MutableMapping[str, str] = os.environ if environ is None else environ

        self.latest: str | None = None          # None until resolved
        self.active_path: Path | None = None    # None until activated

    @classmethod
    def from_environ(cls, **kwargs) -> SessionContext:
        """Build a context that adopts an inherited TZDIR as the active dataset."""
        ctx = cls(**kwargs)
        inherited = ctx.environ.get(TZDIR_ENV)
        if inherited:
            ctx.active_path = Path(inherited)
        return ctx

    def __repr__(self) -> str:
        return (
            f"<SessionContext transport={self.transport.name!r} "
            f"compiler={self.compiler.name!r} active={self.active_path}>"
        )

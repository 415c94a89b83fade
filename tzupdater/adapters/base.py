"""
Adapter base — the protocol contract between the pipeline and the outside world.

Two collaborators sit behind these interfaces: the network transport
(IANA website and release archives) and the zic compiler. The pipeline
only talks to them through this protocol, so tests swap in the mock
adapters and count calls.

Adapters NEVER raise — failures are captured in the returned outcome.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from tzupdater.core.models.outcome import CompilerRun, FetchOutcome


class Transport(ABC):
    """Network access: fetch a page as text, download a file to disk."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The transport identifier (e.g., 'urllib', 'mock')."""

    @abstractmethod
    def fetch_text(self, url: str, timeout: int = 60) -> FetchOutcome:
        """GET ``url`` and return its body in ``outcome.text``."""

    @abstractmethod
    def download(self, url: str, dest: Path, timeout: int = 60) -> FetchOutcome:
        """GET ``url`` and stream it to ``dest``.

        On failure ``dest`` may be left partially written; the caller
        owns cleanup.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class Compiler(ABC):
    """The external zic compiler."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The compiler identifier (e.g., 'zic', 'mock')."""

    @abstractmethod
    def is_available(self, environ: Mapping[str, str]) -> bool:
        """Whether the compiler can be found on ``environ['PATH']``.

        Should be fast and never raise.
        """

    @abstractmethod
    def compile(
        self,
        source: Path,
        output_dir: Path,
        environ: Mapping[str, str],
    ) -> CompilerRun:
        """Compile one component file into ``output_dir``."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"

"""
Mock adapters — test doubles for the transport and the compiler.

Used by the test suite to simulate IANA responses and zic runs without
touching the network or a real binary. Both record every call so tests
can assert exactly how many fetches and compilations happened.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from tzupdater.adapters.base import Compiler, Transport
from tzupdater.core.models.outcome import CompilerRun, FetchOutcome, FetchStatus


class MockTransport(Transport):
    """In-memory transport.

    Pages and archives are keyed by URL. Unknown URLs answer
    ``not_found``. A configured failure may leave a partial file behind
    to mimic an interrupted download.
    """

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        archives: dict[str, bytes] | None = None,
    ):
        self._pages: dict[str, str] = dict(pages or {})
        self._archives: dict[str, bytes] = dict(archives or {})
        self._failures: dict[str, tuple[FetchStatus, str, bytes | None]] = {}
        self._call_log: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[tuple[str, str]]:
        """``(method, url)`` for every request received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def download_count(self) -> int:
        return sum(1 for method, _ in self._call_log if method == "download")

    @property
    def fetch_count(self) -> int:
        return sum(1 for method, _ in self._call_log if method == "fetch_text")

    def set_page(self, url: str, text: str) -> None:
        self._pages[url] = text

    def set_archive(self, url: str, data: bytes) -> None:
        self._archives[url] = data

    def set_failure(
        self,
        url: str,
        status: FetchStatus = "failed",
        error: str = "Mock failure",
        partial: bytes | None = None,
    ) -> None:
        """Make ``url`` fail with ``status``, optionally writing ``partial`` first."""
        self._failures[url] = (status, error, partial)

    def fetch_text(self, url: str, timeout: int = 60) -> FetchOutcome:
        self._call_log.append(("fetch_text", url))
        if url in self._failures:
            status, error, _ = self._failures[url]
            return FetchOutcome(url=url, status=status, error=error)
        if url in self._pages:
            return FetchOutcome.success(url, text=self._pages[url], http_status=200)
        return FetchOutcome.not_found(url)

    def download(self, url: str, dest: Path, timeout: int = 60) -> FetchOutcome:
        self._call_log.append(("download", url))
        if url in self._failures:
            status, error, partial = self._failures[url]
            if partial is not None:
                dest.parent.mkdir(parents=True, exist_ok=True)
                dest.write_bytes(partial)
            return FetchOutcome(url=url, status=status, error=error, path=dest)
        if url not in self._archives:
            return FetchOutcome.not_found(url, path=dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(self._archives[url])
        return FetchOutcome.success(url, path=dest, http_status=200)

    def reset(self) -> None:
        """Clear the call log (responses are kept)."""
        self._call_log.clear()


class MockCompiler(Compiler):
    """Fake zic.

    Succeeds silently by default and drops one file per component into
    the output directory. Per-component exit codes and output can be
    configured by component file name.
    """

    def __init__(self, available: bool = True):
        self._available = available
        self._results: dict[str, tuple[int, str]] = {}
        self._call_log: list[tuple[Path, Path]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[tuple[Path, Path]]:
        """``(source, output_dir)`` for every compilation."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def compiled_components(self) -> list[str]:
        return [source.name for source, _ in self._call_log]

    def set_result(self, component: str, return_code: int = 0, output: str = "") -> None:
        self._results[component] = (return_code, output)

    def set_failure(self, component: str, error: str = "zic: syntax error") -> None:
        self._results[component] = (1, error)

    def is_available(self, environ: Mapping[str, str]) -> bool:
        return self._available

    def compile(
        self,
        source: Path,
        output_dir: Path,
        environ: Mapping[str, str],
    ) -> CompilerRun:
        self._call_log.append((source, output_dir))
        return_code, output = self._results.get(source.name, (0, ""))
        if return_code == 0:
            output_dir.mkdir(parents=True, exist_ok=True)
            (output_dir / source.name.capitalize()).write_text("TZif", encoding="utf-8")
        return CompilerRun(return_code=return_code, output=output)

    def reset(self) -> None:
        self._call_log.clear()
        self._results.clear()

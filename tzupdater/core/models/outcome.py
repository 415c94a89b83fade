"""
Outcome models — the typed results returned by every pipeline stage.

Stages never raise past their boundary. A network fetch returns a
FetchOutcome, each zic run a ComponentResult, a compilation a
CompileReport. The use case layer folds them into an InstallResult.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from tzupdater.core.models.release import CompiledDataset

FetchStatus = Literal["ok", "not_found", "unreachable", "failed"]

ErrorKind = Literal[
    "tool_missing",
    "source_unreachable",
    "release_not_found",
    "fetch_failed",
    "component_compile_error",
    "version_unresolvable",
    "internal_error",
]

# FetchStatus → ErrorKind for everything that is not "ok"
FETCH_ERROR_KINDS: dict[str, ErrorKind] = {
    "not_found": "release_not_found",
    "unreachable": "source_unreachable",
    "failed": "fetch_failed",
}


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class FetchOutcome(BaseModel):
    """Result of one network request made by a transport.

    The transport classifies failures itself: callers branch on
    ``status`` and never inspect error text.
    """

    url: str
    status: FetchStatus = "ok"
    text: str | None = None         # body, for text fetches
    path: Path | None = None        # destination, for downloads
    http_status: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def success(cls, url: str, **kwargs: Any) -> FetchOutcome:
        return cls(url=url, status="ok", **kwargs)

    @classmethod
    def not_found(cls, url: str, error: str = "", **kwargs: Any) -> FetchOutcome:
        return cls(url=url, status="not_found", error=error or "404 not found", **kwargs)

    @classmethod
    def unreachable(cls, url: str, error: str, **kwargs: Any) -> FetchOutcome:
        return cls(url=url, status="unreachable", error=error, **kwargs)

    @classmethod
    def failure(cls, url: str, error: str, **kwargs: Any) -> FetchOutcome:
        return cls(url=url, status="failed", error=error, **kwargs)


class CompilerRun(BaseModel):
    """Raw result of one compiler invocation: exit status + combined output."""

    return_code: int
    output: str = ""
    launch_error: str | None = None     # set when the process could not start
    duration_ms: int = 0

    @property
    def lines(self) -> list[str]:
        return [line for line in self.output.splitlines() if line.strip()]


class ComponentResult(BaseModel):
    """Outcome of compiling one tzdata component file."""

    name: str
    status: Literal["compiled", "failed", "missing", "skipped"] = "compiled"
    return_code: int | None = None
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "compiled"

    @property
    def failed(self) -> bool:
        return self.status == "failed"


class CompileReport(BaseModel):
    """Aggregated outcome of compiling every component of a release."""

    release: str
    compiled_dir: Path
    strict: bool = True
    components: list[ComponentResult] = Field(default_factory=list)
    aborted: bool = False           # strict mode stopped the loop early
    error: str | None = None        # extraction or marker write failure

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)

    @property
    def compiled_count(self) -> int:
        return sum(1 for c in self.components if c.ok)

    @property
    def failed_components(self) -> list[ComponentResult]:
        return [c for c in self.components if c.failed]

    @property
    def ok(self) -> bool:
        """At least one clean component, and no errors when strict."""
        if self.error or self.aborted or self.compiled_count == 0:
            return False
        if self.strict and self.failed_components:
            return False
        return True

    def finish(self) -> None:
        """Stamp the end of the compilation."""
        self.ended_at = _now_iso()

    def dataset(self) -> CompiledDataset | None:
        """The compiled tree, or None when the compilation is unusable."""
        if not self.ok:
            return None
        return CompiledDataset(release=self.release, path=self.compiled_dir)

    def to_dict(self) -> dict:
        return {
            "release": self.release,
            "compiled_dir": str(self.compiled_dir),
            "ok": self.ok,
            "aborted": self.aborted,
            "error": self.error,
            "compiled": self.compiled_count,
            "components": [
                {
                    "name": c.name,
                    "status": c.status,
                    "errors": c.errors,
                    "warnings": len(c.warnings),
                }
                for c in self.components
            ],
        }


class InstallOptions(BaseModel):
    """Per-call knobs for an install."""

    show_compiler_log: bool = False     # log every line zic prints
    strict_on_error: bool = True        # abort on the first failing component
    verbose: bool = True                # per-component progress at INFO
    activate: bool = True               # switch TZDIR once compiled
    fail_if_tool_missing: bool = False  # raise instead of reporting tool_missing

"""
zic adapter — run the IANA zone information compiler.

One invocation per component file:

    zic -d <output_dir> <source_dir>/<component>

stdout and stderr are merged so warnings and errors keep their order.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from collections.abc import Mapping
from pathlib import Path

from tzupdater.adapters.base import Compiler
from tzupdater.core.models.outcome import CompilerRun

logger = logging.getLogger(__name__)


class ZicCompiler(Compiler):
    """Compile tzdata sources with the system zic binary."""

    def __init__(self, executable: str = "zic", timeout: int = 300):
        self._executable = executable
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "zic"

    def which(self, environ: Mapping[str, str]) -> str | None:
        """Absolute path of the executable on ``environ['PATH']``."""
        return shutil.which(self._executable, path=environ.get("PATH"))

    def is_available(self, environ: Mapping[str, str]) -> bool:
        return self.which(environ) is not None

    def compile(
        self,
        source: Path,
        output_dir: Path,
        environ: Mapping[str, str],
    ) -> CompilerRun:
        exe = self.which(environ)
        if exe is None:
            return CompilerRun(
                return_code=127,
                launch_error=f"{self._executable} not found on PATH",
            )

        cmd = [exe, "-d", str(output_dir), str(source)]
        logger.debug("Executing: %s", " ".join(cmd))
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                env=dict(environ),
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            return CompilerRun(
                return_code=124,
                launch_error=f"{self._executable} timed out after {self._timeout}s",
            )
        except OSError as e:
            return CompilerRun(return_code=126, launch_error=f"Cannot run {exe}: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return CompilerRun(
            return_code=result.returncode,
            output=result.stdout or "",
            duration_ms=elapsed_ms,
        )

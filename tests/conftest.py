"""
Shared test fixtures and configuration.
"""

import io
import tarfile
from pathlib import Path

import pytest

from tzupdater.adapters.mock import MockCompiler, MockTransport
from tzupdater.core.context import SessionContext
from tzupdater.core.models.settings import Settings

IANA_PAGE = """\
<html>
<body>
<h1>Time Zone Database</h1>
<p>The latest version is <span id="version">2024a</span>, released 2024-02-01.</p>
</body>
</html>
"""

DEFAULT_COMPONENTS = (
    "etcetera", "southamerica", "northamerica", "europe", "africa",
    "antarctica", "asia", "australasia", "backward", "factory",
)


def build_tzdata_archive(components=DEFAULT_COMPONENTS, extra: dict | None = None) -> bytes:
    """Build an in-memory tzdata tarball holding one small file per component."""
    files = {name: f"# tzdata {name}\nZone Etc/UTC 0 - UTC\n" for name in components}
    files.update(extra or {})
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name=name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temporary target folder."""
    return Settings(target_folder=tmp_path / "IANA_release")


@pytest.fixture
def transport(settings: Settings) -> MockTransport:
    """Transport serving the IANA page and the 2024a / 2023c archives."""
    mock = MockTransport()
    mock.set_page(settings.iana_website, IANA_PAGE)
    mock.set_archive(settings.archive_url("2024a"), build_tzdata_archive())
    mock.set_archive(settings.archive_url("2023c"), build_tzdata_archive())
    return mock


@pytest.fixture
def compiler() -> MockCompiler:
    return MockCompiler()


@pytest.fixture
def environ() -> dict:
    """Private process environment, so tests never touch os.environ."""
    return {"PATH": "/usr/bin:/bin"}


@pytest.fixture
def session(settings, transport, compiler, environ) -> SessionContext:
    return SessionContext(
        settings=settings,
        transport=transport,
        compiler=compiler,
        environ=environ,
    )


@pytest.fixture
def make_archive():
    """Factory building tzdata tarball bytes (see build_tzdata_archive)."""
    return build_tzdata_archive

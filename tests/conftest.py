"""
Pytest configuration and shared fixtures.
"""

import pytest
from pathlib import Path

from omada_installer.logger import get_logger

# Created before any module grabs the singleton, so tests write no log files
get_logger(enable_file=False, enable_console=False)

from omada_installer.config import InstallerConfig  # noqa: E402


@pytest.fixture
def config(tmp_path) -> InstallerConfig:
    """Config with no retry delay and a temporary download directory."""
    return InstallerConfig(retry_delay=0.0, download_dir=tmp_path / "downloads", log_dir=tmp_path / "logs")


@pytest.fixture
def listing_html() -> str:
    """Trimmed copy of the controller download page."""
    return """
    <html>
    <head><title>Omada Software Controller - Download</title></head>
    <body>
        <div class="download-list">
            <a class="btn" href="/upload/software/2025/202508/omada_v5.15.24.19_linux_x64_20250724152622.deb">Linux x64 (deb)</a>
            <a class="btn" href="https://support.omadanetworks.com/upload/software/2025/202508/omada_v5.15.24.19_linux_arm64_20250724152622.deb">Linux arm64 (deb)</a>
            <a class="btn" href="/upload/software/2024/Omada_SDN_Controller_v5.9.31_Linux_x64.deb">Linux x64 (older)</a>
            <a class="btn" href="/upload/software/2025/omada_v6.0.0.7_beta_linux_x64.deb">Beta</a>
            <a class="btn" href="/upload/software/2025/omada_v5.15.24.19_windows.exe">Windows</a>
            <a class="btn" href="/upload/software/2025/omada_v5.15.24.19_linux_x64.tar.gz">Linux x64 (tar.gz)</a>
            <a class="btn" href="/upload/software/2025/202508/omada_v5.15.24.19_linux_x64_20250724152622.deb">Linux x64 (mirror)</a>
            <a>no href</a>
        </div>
    </body>
    </html>
    """


@pytest.fixture
def empty_listing_html() -> str:
    return """
    <html><body>
        <a href="/upload/software/2025/omada_v5.15.24.19_windows.exe">Windows</a>
        <a href="/docs/release-notes.pdf">Release notes</a>
    </body></html>
    """


@pytest.fixture
def package_file(tmp_path) -> Path:
    path = tmp_path / "omada_v5.15.24.19_linux_x64.deb"
    path.write_bytes(b"not really a deb\n")
    return path

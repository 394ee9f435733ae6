"""
Download-target resolution for the Omada controller package.

Scrapes the vendor download page, keeps the stable ``.deb`` links built for
the requested architecture, picks the highest version and checks that the
result lives on a trusted domain and answers a HEAD request.

Resolution is stateless: the same page always yields the same URL, and any
failure raises before a URL is returned.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from .config import InstallerConfig
from .errors import NoCandidateError, UnsupportedArchError, UntrustedDomainError
from .fetch import fetch_page, probe_url
from .logger import get_logger
from .normalize import absolute_url, deduplicate, filename_of, is_trusted_url
from .versioning import Version, extract_version, format_version

logger = get_logger()


class Arch(str, Enum):
    AMD64 = "amd64"
    ARM64 = "arm64"

    @classmethod
    def parse(cls, value) -> "Arch":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedArchError(
                f"Unsupported architecture: {value!r} (supported: amd64, arm64)"
            ) from None


# Substrings that identify a build in the package filename
ARCH_MARKERS = {
    Arch.AMD64: ("x64", "amd64", "x86_64"),
    Arch.ARM64: ("arm64", "aarch64"),
}


@dataclass(frozen=True)
class Candidate:
    url: str
    version: Version

    @property
    def filename(self) -> str:
        return filename_of(self.url)


def extract_package_links(html: str, extension: str = ".deb") -> List[str]:
    """Return every anchor target whose path ends in ``extension``."""
    soup = BeautifulSoup(html, "html.parser")
    links = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if urlparse(href).path.lower().endswith(extension.lower()):
            links.append(href)
    return deduplicate(links)


def normalize_links(links: Iterable[str], origin: str) -> List[str]:
    return deduplicate([absolute_url(href, origin) for href in links])


def filter_by_arch(urls: Iterable[str], arch) -> List[str]:
    """Keep URLs whose filename carries one of the markers for ``arch``."""
    markers = ARCH_MARKERS[Arch.parse(arch)]
    return [u for u in urls if any(m in filename_of(u).lower() for m in markers)]


def _marker_pattern(markers: Sequence[str]) -> "re.Pattern":
    # A marker counts only as its own token: "rc1" and "_RC_" match, "aarch64" does not
    alternatives = "|".join(re.escape(m) for m in markers if m)
    return re.compile(rf"(?<![a-z])(?:{alternatives})\d*(?![a-z])", re.IGNORECASE)


def exclude_prereleases(urls: Iterable[str], markers: Sequence[str]) -> List[str]:
    """Drop URLs whose filename carries a pre-release marker."""
    if not any(markers):
        return list(urls)
    pattern = _marker_pattern(markers)
    return [u for u in urls if not pattern.search(filename_of(u))]


def build_candidates(urls: Iterable[str]) -> List[Candidate]:
    return [Candidate(url=u, version=extract_version(filename_of(u))) for u in urls]


def select_latest(candidates: Sequence[Candidate]) -> Candidate:
    """Highest version wins; among equal versions the first one seen."""
    if not candidates:
        raise NoCandidateError("No package candidates to choose from")
    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate.version > best.version:
            best = candidate
    return best


def check_trusted_domain(url: str, config: InstallerConfig) -> None:
    if not is_trusted_url(url, config.trusted_domains):
        raise UntrustedDomainError(
            f"Suspicious download domain: {url} "
            f"(expected https on {', '.join(config.trusted_domains)})"
        )


def select_from_page(html: str, arch, config: InstallerConfig) -> Candidate:
    """Run extraction, filtering and version selection over a listing page."""
    arch = Arch.parse(arch)
    links = normalize_links(
        extract_package_links(html, config.package_extension), config.site_origin
    )
    matching = filter_by_arch(links, arch)
    stable = exclude_prereleases(matching, config.prerelease_markers)
    logger.debug(
        "Filtered package links",
        links=len(links), arch_matches=len(matching), stable=len(stable),
    )
    if not stable:
        raise NoCandidateError(
            f"No suitable {config.package_extension} found on the download page for {arch.value}"
        )
    return select_latest(build_candidates(stable))


def resolve(arch, config: Optional[InstallerConfig] = None) -> str:
    """Resolve the download URL of the newest stable package for ``arch``.

    Raises:
        UnsupportedArchError: ``arch`` is not amd64 or arm64
        FetchError: the listing page could not be fetched
        NoCandidateError: no stable package matched the architecture
        UntrustedDomainError: the chosen URL is not on a trusted domain
        UnreachableError: the chosen URL did not answer HEAD with 2xx
    """
    config = config or InstallerConfig()
    arch = Arch.parse(arch)

    logger.info("Resolving package from download page", url=config.listing_url, arch=arch.value)
    html = fetch_page(config.listing_url, config)

    best = select_from_page(html, arch, config)
    logger.info("Selected package", url=best.url, version=format_version(best.version))

    check_trusted_domain(best.url, config)
    probe_url(best.url, config)
    return best.url

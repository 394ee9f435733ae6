from urllib.parse import urljoin, urlparse, unquote
import posixpath


def canonical_url(url: str) -> str:
    parsed = urlparse(url.strip())
    # Drop the fragment; the query can be part of a signed download link
    query = f"?{parsed.query}" if parsed.query else ""
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}{parsed.path}{query}"
    return f"{parsed.path}{query}"


def absolute_url(href: str, origin: str) -> str:
    """Resolve ``href`` against the site origin unless it is already absolute."""
    href = href.strip()
    if href.startswith(("http://", "https://")):
        return canonical_url(href)
    if href.startswith("//"):
        return canonical_url(f"{urlparse(origin).scheme}:{href}")
    return canonical_url(urljoin(origin.rstrip("/") + "/", href))


def filename_of(url: str) -> str:
    """Last path segment of a URL, percent-decoded."""
    return unquote(posixpath.basename(urlparse(url).path))


def host_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def deduplicate(items: list[str]) -> list[str]:
    """Deduplicate while preserving order."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def is_trusted_url(url: str, trusted_domains) -> bool:
    """True for https URLs whose host is exactly one of ``trusted_domains``."""
    return urlparse(url).scheme == "https" and host_of(url) in {d.lower() for d in trusted_domains}

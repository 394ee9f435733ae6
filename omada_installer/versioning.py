"""
Version tokens embedded in package filenames.

Versions are plain tuples of ints, so Python's tuple ordering gives the
``sort -V`` behaviour: numeric per component, and with an equal prefix the
longer tuple sorts higher.
"""

import re
from typing import Tuple

Version = Tuple[int, ...]

DEFAULT_VERSION: Version = (0, 0, 0)

# 1 to 4 dot-separated numeric groups, e.g. 5.15 or 5.15.24.19
VERSION_RE = re.compile(r"\d+(?:\.\d+){1,3}")


def extract_version(filename: str) -> Version:
    """Return the first dotted version in ``filename``, or 0.0.0 if none."""
    match = VERSION_RE.search(filename)
    if not match:
        return DEFAULT_VERSION
    return tuple(int(part) for part in match.group(0).split("."))


def format_version(version: Version) -> str:
    return ".".join(str(part) for part in version)

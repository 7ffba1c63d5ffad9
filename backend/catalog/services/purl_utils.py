"""
PURL (Package URL) Utilities

Only the two segments the normalizer needs are extracted here.
See: https://github.com/package-url/purl-spec

Format: pkg:type/namespace/name@version?qualifiers#subpath
"""

import re
from typing import Optional
from urllib.parse import unquote

_TYPE_RE = re.compile(r"^pkg:([^/]+)/")
_NAMESPACE_RE = re.compile(r"^pkg:[^/]+/([^/@?#]+)/")


def get_purl_type(purl: Optional[str]) -> Optional[str]:
    """The scheme segment of a PURL (``pkg:<type>/``), used as package manager."""
    if not purl or not isinstance(purl, str):
        return None
    match = _TYPE_RE.match(purl)
    return match.group(1).lower() if match else None


def get_purl_namespace(purl: Optional[str]) -> Optional[str]:
    """First path segment between the type and the package name, if any."""
    if not purl or not isinstance(purl, str):
        return None
    match = _NAMESPACE_RE.match(purl)
    return unquote(match.group(1)) if match else None

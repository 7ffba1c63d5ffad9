"""
Repository URL helpers.

Normalization keeps one registry entry per source repository regardless of
how a client spells its remote.
"""

import re

_SSH_REMOTES = (
    (re.compile(r"^git@github\.com:"), "https://github.com/"),
    (re.compile(r"^git@gitlab\.com:"), "https://gitlab.com/"),
    (re.compile(r"^git@bitbucket\.org:"), "https://bitbucket.org/"),
)


def normalize_repo_url(url: str) -> str:
    """
    Normalize a repository URL.

    Strips trailing slashes and a ``.git`` suffix, rewrites SSH remotes of
    the common hosts to HTTPS and lower-cases the result.
    """
    if not url:
        return url

    url = url.strip()
    url = re.sub(r"/+$", "", url)
    url = re.sub(r"\.git$", "", url)

    for pattern, replacement in _SSH_REMOTES:
        url = pattern.sub(replacement, url)

    return url.lower()


def detect_scm_type(url: str) -> str:
    """Best-effort SCM type from a repository URL. Defaults to git."""
    if not url:
        return "git"

    lower_url = url.lower()

    if any(host in lower_url for host in ("github.com", "gitlab.com", "bitbucket.org")):
        return "git"
    if "svn." in lower_url or "/svn/" in lower_url:
        return "svn"
    if "hg." in lower_url or "/hg/" in lower_url:
        return "mercurial"
    return "git"


def extract_repo_name(url: str) -> str:
    """Last path segment of a repository URL, without ``.git``."""
    if not url:
        return ""

    url = re.sub(r"\.git$", "", url.rstrip("/"))
    match = re.search(r"[/:]([^/:]+)$", url)
    return match.group(1) if match else ""

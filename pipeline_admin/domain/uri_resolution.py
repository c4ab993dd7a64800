"""Resolution of user-supplied paths into URI references for job requests.

When the server shares the client's file system, paths become absolute `file:`
URIs and must exist locally. Otherwise paths are opaque references into the
data archive uploaded with the request and are never checked on disk.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from urllib.parse import quote, urljoin, urlsplit

from .errors import UriNotFoundError, UriResolutionError


class UriResolutionMode(str, Enum):
    """How paths are interpreted for the active service connection."""

    LOCAL = "local"
    REMOTE = "remote"


def domain_resolution_mode_for(is_local: bool) -> UriResolutionMode:
    """Map the service's shared-file-system flag to a resolution mode.

    Args:
        is_local: Whether the server accepts local `file:` URIs.

    Returns:
        UriResolutionMode: `LOCAL` when the file system is shared, else `REMOTE`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return UriResolutionMode.LOCAL if is_local else UriResolutionMode.REMOTE


def domain_resolve_uri(
    path: str,
    mode: UriResolutionMode,
    base_directory: Path | None = None,
    expect_directory: bool | None = None,
) -> str:
    """Resolve one path into the URI string sent to the server.

    Args:
        path: User-supplied path.
        mode: Resolution mode of the active connection.
        base_directory: Directory relative paths resolve against; defaults to
            the current working directory. Ignored in remote mode.
        expect_directory: `True` requires a local directory, `False` a regular
            file, `None` accepts either. Ignored in remote mode.

    Returns:
        str: Absolute `file:` URI in local mode, slash-normalized path in remote mode.

    Raises:
        UriResolutionError: Raised when a local path does not form a `file:` URI
            or is not of the expected kind.
        UriNotFoundError: Raised when a local path does not exist.
    """

    if mode is UriResolutionMode.REMOTE:
        return _domain_to_slash(path)

    if not path.strip():
        raise UriResolutionError("empty path cannot be resolved", path=path)

    base_path = base_directory if base_directory is not None else Path.cwd()
    base_uri = domain_build_base_uri(base_path)
    resolved_uri = urljoin(base_uri, quote(_domain_to_slash(path), safe="/:"))

    split_uri = urlsplit(resolved_uri)
    if split_uri.scheme != "file" or not split_uri.path.startswith("/"):
        raise UriResolutionError(f"'{path}' does not resolve to an absolute file URI", path=path)

    candidate_path = Path(path)
    if not candidate_path.is_absolute():
        candidate_path = base_path / candidate_path
    if not candidate_path.exists():
        raise UriNotFoundError(f"'{path}' does not exist", path=path)
    if expect_directory is True and not candidate_path.is_dir():
        raise UriResolutionError(f"'{path}' is not a directory", path=path)
    if expect_directory is False and not candidate_path.is_file():
        raise UriResolutionError(f"'{path}' is not a file", path=path)

    return resolved_uri


def domain_build_base_uri(base_directory: Path) -> str:
    """Build the directory `file:` URI that relative paths resolve against.

    Args:
        base_directory: Local base directory.

    Returns:
        str: URI with a leading and a trailing slash in its path component.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    base_text = _domain_to_slash(str(base_directory))
    if not base_text.startswith("/"):
        # drive-letter paths
        base_text = "/" + base_text
    if not base_text.endswith("/"):
        base_text += "/"
    return "file:" + quote(base_text, safe="/:")


def _domain_to_slash(path: str) -> str:
    if os.sep == "/":
        return path
    return path.replace(os.sep, "/")

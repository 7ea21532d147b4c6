from pathlib import Path
from typing import IO

from buildinfo.features.metadata.models import BuildInfo


def read(stream: IO[str] | IO[bytes]) -> BuildInfo:
    """Read and decode a JSON build information document from ``stream``.

    Parameters
    ----------
    stream : IO[str] or IO[bytes]
        A text or binary file object.

    Returns
    -------
    BuildInfo
        The decoded build information.

    Raises
    ------
    MalformedInputError
        If the content is not a valid build information document.
    """
    return BuildInfo.from_json(stream.read())


def open_file(path: str | Path) -> BuildInfo:
    """Open ``path`` and decode its contents using ``read``.

    Raises
    ------
    OSError
        If the file cannot be opened.
    MalformedInputError
        If the content is not a valid build information document.
    """
    with open(path, "rb") as f:
        return read(f)

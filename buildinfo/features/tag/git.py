"""Query tags and their details from a git repository."""

import asyncio
from datetime import datetime, timezone

from buildinfo.core.config import settings
from buildinfo.core.exceptions import ExternalToolError, MalformedInputError
from buildinfo.core.logger import _setup_custom_logger

logger = _setup_custom_logger(__name__)

# Diagnostics of `git describe` when the repository does not contain any tags.
NO_TAGS_DIAGNOSTICS = ("No names found", "cannot describe")


async def latest_tag(cwd: str | None = None) -> tuple[str, str]:
    """Return the most recent tag by version sort order.

    Returns
    -------
    tuple[str, str]
        The tag and whatever followed its first ``-``.
    """
    out = await _exec_git("tag", "--sort=-v:refname", cwd=cwd)

    lines = out.lstrip().splitlines()
    return _cut_tag(lines[0] if lines else "")


async def current_tag(cwd: str | None = None) -> tuple[str, str]:
    """Return the tag reachable from the current commit.

    A repository without any tags is not an error; the configured default tag
    is returned instead.

    Returns
    -------
    tuple[str, str]
        The tag and whatever followed its first ``-``.

    Raises
    ------
    ExternalToolError
        If git fails for any other reason.
    """
    try:
        out = await _exec_git("describe", "--tags", "--abbrev=0", cwd=cwd)
    except ExternalToolError as exc:
        if any(diag in exc.stderr for diag in NO_TAGS_DIAGNOSTICS):
            logger.debug(f"No tags found, using default tag {settings.default_tag}")
            return settings.default_tag, ""
        raise

    return _cut_tag(out)


async def tag_details(tag: str, cwd: str | None = None) -> tuple[str, datetime]:
    """Return the short revision and commit time of ``tag``.

    Raises
    ------
    MalformedInputError
        If git's output cannot be parsed.
    """
    out = (await _exec_git("log", "-1", "--pretty=%h,%ct", tag, cwd=cwd)).strip()

    revision, sep, timestamp = out.partition(",")
    if not sep:
        raise MalformedInputError(f"unexpected tag details for '{tag}': {out!r}")

    try:
        seconds = int(timestamp)
    except ValueError as exc:
        raise MalformedInputError(
            f"invalid commit timestamp for '{tag}': {timestamp!r}"
        ) from exc

    return revision, datetime.fromtimestamp(seconds, tz=timezone.utc)


def _cut_tag(text: str) -> tuple[str, str]:
    tag, _, remains = text.strip().partition("-")
    return tag, remains


async def _exec_git(*args: str, cwd: str | None = None) -> str:
    logger.debug(f"Running git {' '.join(args)}")

    return await _exec(settings.git_binary, *args, cwd=cwd, timeout=settings.git_timeout)


async def _exec(
    program: str, *args: str, cwd: str | None = None, timeout: float | None = None
) -> str:
    """Run ``program`` and return its standard output.

    The process is killed when the awaiting task is cancelled or the timeout
    expires.

    Raises
    ------
    ExternalToolError
        If the program cannot be started, exits non-zero or times out.
    asyncio.CancelledError
        If the awaiting task is cancelled.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            program,
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ExternalToolError(f"cannot run {program}: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError as exc:
        await _kill(proc)
        raise ExternalToolError(
            f"{program} {' '.join(args)} timed out after {timeout} seconds"
        ) from exc
    except asyncio.CancelledError:
        await _kill(proc)
        raise

    if proc.returncode != 0:
        raise ExternalToolError(
            f"{program} {' '.join(args)} exited with status {proc.returncode}",
            stderr=stderr.decode("utf-8", errors="replace"),
            exit_code=proc.returncode,
        )

    return stdout.decode("utf-8", errors="replace")


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        proc.kill()
        await proc.wait()

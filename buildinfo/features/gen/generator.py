"""Generate source files that embed the repository's version."""

import asyncio
import inspect
import os
from collections.abc import Awaitable, Callable
from typing import IO, Any

from jinja2 import Environment, StrictUndefined, Template, TemplateError

from buildinfo.core.exceptions import MalformedInputError
from buildinfo.core.logger import _setup_custom_logger
from buildinfo.features.tag import git

logger = _setup_custom_logger(__name__)

ReaderFunc = Callable[[], Awaitable[str]]

CALLER_VAR = "Caller"
CALLER_DIR_VAR = "CallerDir"
PACKAGE_VAR = "Package"
FUNC_NAME_VAR = "FuncName"
VERSION_VAR = "Version"

DEFAULT_PACKAGE = "main"
DEFAULT_FUNC_NAME = "get_buildinfo"
DEFAULT_VERSION = "0.0.0"

DEFAULT_TEMPLATE = '''\
# Code generated by {{ Caller }}; DO NOT EDIT.
"""Build information of the {{ Package }} package."""

from buildinfo import BuildInfo

VERSION = "{{ Version }}"


def {{ FuncName }}() -> BuildInfo:
    return BuildInfo(version=VERSION)
'''

_env = Environment(undefined=StrictUndefined, keep_trailing_newline=True)


async def git_tag() -> str:
    """ReaderFunc returning the repository's current tag."""
    tag, _ = await git.current_tag()
    return tag


class Generator:
    """Renders templates with the repository's version and caller details.

    Parameters
    ----------
    reader : ReaderFunc, optional
        Returns the version to embed, by default ``git_tag``.
    skip_caller : int, optional
        Number of extra stack frames to skip when determining the caller.
    """

    def __init__(self, reader: ReaderFunc = git_tag, skip_caller: int = 0):
        caller = inspect.stack()[skip_caller + 1].filename

        self.reader = reader
        self.default_version = DEFAULT_VERSION
        self.vars: dict[str, Any] = {
            CALLER_VAR: os.path.basename(caller),
            CALLER_DIR_VAR: os.path.dirname(caller),
            PACKAGE_VAR: DEFAULT_PACKAGE,
            FUNC_NAME_VAR: DEFAULT_FUNC_NAME,
        }

    async def aread(self) -> None:
        """Read a version from the reader and store it in ``vars``.

        An empty version is stored as ``default_version``.
        """
        version = await self.reader()
        self.vars[VERSION_VAR] = version or self.default_version

        logger.debug(f"Generator read version {self.vars[VERSION_VAR]}")

    def read(self) -> None:
        asyncio.run(self.aread())

    async def aexecute(self, template: Template | str, stream: IO[str]) -> None:
        """Render ``template`` with ``vars`` into ``stream``.

        The version is read first unless a non-default version is already
        stored.

        Raises
        ------
        MalformedInputError
            If the template cannot be parsed or rendered.
        """
        if self.vars.get(VERSION_VAR) in (None, "", self.default_version):
            await self.aread()

        try:
            if isinstance(template, str):
                template = _env.from_string(template)
            output = template.render(self.vars)
        except TemplateError as exc:
            raise MalformedInputError(f"cannot render template: {exc}") from exc

        stream.write(output)

    def execute(self, template: Template | str, stream: IO[str]) -> None:
        asyncio.run(self.aexecute(template, stream))

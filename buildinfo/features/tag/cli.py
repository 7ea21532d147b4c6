"""
Print the repository's version tag, or parts of it.

Usage:
    buildinfo                       # current tag as-is
    buildinfo -l major minor        # parts of the latest tag
    buildinfo "v{{ inc_patch }}"    # render a template
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence

from buildinfo.core.exceptions import BuildInfoError
from buildinfo.core.logger import _setup_custom_logger
from buildinfo.features.tag import git
from buildinfo.features.tag.version import (
    TagState,
    TagVersion,
    is_template,
    render_fields,
    render_template,
)

logger = _setup_custom_logger(__name__)

OUTPUT_COMMANDS = """\
Output commands:
  original            original version (default)
  version             version without metadata
  full                version including metadata
  major.minor.patch   alias of version
  major.minor         major and minor version parts
  major               major version part only
  minor               minor version part only
  patch               patch part only
  +major              version with increased major part
  +minor              version with increased minor part
  +patch              version with increased patch part
  revision            commit revision
  rev                 alias of revision
  time                time of commit
"""


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="buildinfo",
        description="Print the repository's version tag, or parts of it.",
        epilog=OUTPUT_COMMANDS,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-l", "--latest", action="store_true", help="Use latest tag"
    )
    parser.add_argument(
        "args", nargs="*", help="A template or one or more output commands"
    )

    args = parser.parse_args(argv)

    try:
        output = asyncio.run(run(args.args, latest=args.latest))
    except BuildInfoError as exc:
        print(f"fatal error: {exc}")
        sys.exit(exc.exit_code)

    sys.stdout.write(output)


async def run(args: Sequence[str], latest: bool = False) -> str:
    """Resolve the tag and render ``args`` for it.

    Parameters
    ----------
    args : Sequence[str]
        Nothing for the raw tag, a single template, or field selectors.
    latest : bool, optional
        Use the latest tag instead of the current one, by default False.

    Returns
    -------
    str
        The output to print.
    """
    if latest:
        tag, _ = await git.latest_tag()
    else:
        tag, _ = await git.current_tag()

    if not args:
        return tag

    state = TagState(TagVersion.parse(tag))

    if len(args) == 1 and is_template(args[0]):
        return await render_template(state, args[0])

    return await render_fields(state, args)


if __name__ == "__main__":
    main()

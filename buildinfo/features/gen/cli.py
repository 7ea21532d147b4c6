"""
Write a Python module embedding the repository's current version tag.

Usage:
    buildinfo-gen mypackage/_version.py --package mypackage

Optional:
    --func-name get_buildinfo
    --template path/to/template.jinja
"""

import argparse
import io
import sys
from collections.abc import Sequence
from pathlib import Path

from buildinfo.core.exceptions import BuildInfoError
from buildinfo.core.logger import _setup_custom_logger, _setup_root_logger
from buildinfo.features.gen.generator import (
    CALLER_VAR,
    DEFAULT_TEMPLATE,
    FUNC_NAME_VAR,
    PACKAGE_VAR,
    Generator,
)

PROG = "buildinfo-gen"

logger = _setup_custom_logger(__name__)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Generate a module embedding the current version tag.",
    )
    parser.add_argument("output", help="Path of the module to write")
    parser.add_argument("--package", required=False)
    parser.add_argument("--func-name", required=False)
    parser.add_argument("--template", required=False, help="Jinja2 template file")

    args = parser.parse_args(argv)
    _setup_root_logger()

    gen = Generator()
    gen.vars[CALLER_VAR] = PROG
    if args.package:
        gen.vars[PACKAGE_VAR] = args.package
    if args.func_name:
        gen.vars[FUNC_NAME_VAR] = args.func_name

    output = Path(args.output)
    buf = io.StringIO()
    try:
        template = DEFAULT_TEMPLATE
        if args.template:
            template = Path(args.template).read_text(encoding="utf-8")

        gen.execute(template, buf)
        output.write_text(buf.getvalue(), encoding="utf-8")
    except BuildInfoError as exc:
        print(f"fatal error: {exc}")
        sys.exit(exc.exit_code)
    except OSError as exc:
        print(f"fatal error: {exc}")
        sys.exit(1)

    logger.info(f"Wrote {output}")


if __name__ == "__main__":
    main()

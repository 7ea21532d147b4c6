"""Recognizable placeholder values for build information.

Declare build-time variables with these defaults. When a release is built
without injecting the real values, ``is_dummy`` detects it.
"""

from datetime import datetime, timezone

from buildinfo.features.metadata.models import BuildInfo

DUMMY_VERSION = "0.0.0"
DUMMY_REVISION = "abcdef"
DUMMY_BRANCH = "HEAD"
DUMMY_TIME = datetime(1997, 8, 29, 13, 37, 0, tzinfo=timezone.utc)


def dummy(bld: BuildInfo) -> BuildInfo:
    """Return a copy of ``bld`` with every unset field set to its dummy value."""
    return bld.model_copy(
        update={
            "version": bld.version or DUMMY_VERSION,
            "revision": bld.revision or DUMMY_REVISION,
            "branch": bld.branch or DUMMY_BRANCH,
            "time": bld.time or DUMMY_TIME,
            "extra": dict(bld.extra),
        }
    )


def is_dummy(bld: BuildInfo) -> bool:
    """Return True when all tracked fields hold their dummy values.

    This may indicate the build information was not set when the release was
    built.
    """
    return (
        bld.version == DUMMY_VERSION
        and bld.revision == DUMMY_REVISION
        and bld.branch == DUMMY_BRANCH
        and bld.time == DUMMY_TIME
    )

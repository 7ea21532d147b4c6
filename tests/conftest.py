import platform
from datetime import datetime, timezone

import pytest

from buildinfo.core.config import settings
from buildinfo.features.metadata.models import BuildInfo


@pytest.fixture
def python_version() -> str:
    return platform.python_version()


@pytest.fixture
def build_time() -> datetime:
    return datetime(2020, 6, 16, 19, 53, 0, tzinfo=timezone.utc)


@pytest.fixture
def full_build_info(build_time) -> BuildInfo:
    """A record with the version, revision, time and one extra set."""
    return BuildInfo(
        version="v0.66",
        revision="abcdefghi",
        time=build_time,
        extra={"foo": "bar"},
    )


@pytest.fixture
def restore_settings():
    """Restore mutated settings after a test."""
    original = settings.model_dump()

    yield settings

    for key, value in original.items():
        setattr(settings, key, value)

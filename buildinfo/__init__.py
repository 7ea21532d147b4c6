"""
Build and release information for Python applications.

Declare the values your release process injects and create a record:

    from buildinfo import BuildInfo

    bld = BuildInfo(version=os.environ.get("APP_VERSION", ""))
    print(bld)

Or read them from the installed distribution:

    bld = BuildInfo.new(distribution="myapp")

Expose the record as metric labels with ``bld.map()`` together with
``METRIC_NAME`` and ``METRIC_HELP``, or over HTTP with ``create_router``.
"""

from buildinfo.core.exceptions import (
    BuildInfoError,
    ExternalToolError,
    InvalidArgumentError,
    MalformedInputError,
    NotAvailableError,
)
from buildinfo.features.metadata.api import build_info_response, create_router
from buildinfo.features.metadata.dummy import (
    DUMMY_BRANCH,
    DUMMY_REVISION,
    DUMMY_TIME,
    DUMMY_VERSION,
    dummy,
    is_dummy,
)
from buildinfo.features.metadata.embedded import (
    EmbeddedInfo,
    ModuleInfo,
    Setting,
    app_name,
    read_embedded,
)
from buildinfo.features.metadata.models import (
    EMPTY_VERSION,
    LONG_FLAG,
    METRIC_HELP,
    METRIC_NAME,
    RESERVED_KEYS,
    SHORT_FLAG,
    BuildInfo,
    add_version_flag,
)
from buildinfo.features.metadata.read import open_file, read

__all__ = [
    "BuildInfo",
    "BuildInfoError",
    "DUMMY_BRANCH",
    "DUMMY_REVISION",
    "DUMMY_TIME",
    "DUMMY_VERSION",
    "EMPTY_VERSION",
    "EmbeddedInfo",
    "ExternalToolError",
    "InvalidArgumentError",
    "LONG_FLAG",
    "METRIC_HELP",
    "METRIC_NAME",
    "MalformedInputError",
    "ModuleInfo",
    "NotAvailableError",
    "RESERVED_KEYS",
    "SHORT_FLAG",
    "Setting",
    "add_version_flag",
    "app_name",
    "build_info_response",
    "create_router",
    "dummy",
    "is_dummy",
    "open_file",
    "read",
    "read_embedded",
]

"""The build information record and its text and JSON representations."""

import argparse
import json
import platform
import threading
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from dateutil import parser as dateutil_parser
from pydantic import (
    BaseModel,
    Field,
    PrivateAttr,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_serializer,
    model_validator,
)

from buildinfo.core.exceptions import (
    InvalidArgumentError,
    MalformedInputError,
    NotAvailableError,
)
from buildinfo.core.logger import _setup_custom_logger
from buildinfo.features.metadata.embedded import SETTING_VCS_REVISION, read_embedded

logger = _setup_custom_logger(__name__)

# Default command line flags to print the build information of an app.
SHORT_FLAG = "v"
LONG_FLAG = "version"

# Default name (without namespace) and help text of a build info metric.
METRIC_NAME = "build_info"
METRIC_HELP = "Metric with build information labels and a constant value of '1'."

# Version reported in map() and JSON output when the record has no version.
EMPTY_VERSION = "0.0.0"

KEY_VERSION = "version"
KEY_REVISION = "revision"
KEY_BRANCH = "branch"
KEY_TIME = "time"
KEY_DATE = "date"
KEY_PYTHON_VERSION = "python_version"

RESERVED_KEYS = frozenset(
    {KEY_VERSION, KEY_REVISION, KEY_BRANCH, KEY_TIME, KEY_DATE, KEY_PYTHON_VERSION}
)

_FIELD_KEYS = (KEY_VERSION, KEY_REVISION, KEY_BRANCH, KEY_TIME)

# Validation context flag set when decoding untrusted JSON input.
_DECODING = "decoding"

# Guards the first computation of BuildInfo.python_version.
_python_version_lock = threading.Lock()


def is_reserved(key: str) -> bool:
    """Return True when ``key`` collides with a first-class field."""
    return key in RESERVED_KEYS


def format_time(value: datetime) -> str:
    """Format ``value`` as RFC 3339 with second precision.

    Naive datetimes are treated as UTC, and a zero UTC offset is written as
    ``Z``.

    Examples
    --------
    >>> format_time(datetime(2020, 6, 16, 19, 53))
    '2020-06-16T19:53:00Z'
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        return text[:-6] + "Z"

    return text


def parse_time(value: str) -> datetime:
    """Parse an RFC 3339 / ISO 8601 timestamp into an aware datetime.

    Raises
    ------
    MalformedInputError
        If ``value`` is not a valid timestamp.
    """
    try:
        parsed = dateutil_parser.isoparse(value)
    except (ValueError, OverflowError) as exc:
        raise MalformedInputError(f"invalid time '{value}': {exc}") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed


def _fold_unknown(extra: dict[str, Any], key: str, value: Any) -> None:
    if is_reserved(key):
        logger.debug(f"Skipping reserved key '{key}'")
    elif isinstance(value, str):
        extra[key] = value
    else:
        logger.debug(f"Skipping non-string value of key '{key}'")


class BuildInfo(BaseModel):
    """Build and release information of an application.

    Values are usually injected while building a release, e.g. from
    environment variables or a generated module, and passed in as plain
    strings. None of them is assumed to be set.

    Attributes
    ----------
    version : str
        Version of the release. May be empty; output then reports
        ``EMPTY_VERSION``.
    revision : str
        The (short) commit hash the release is built from.
    branch : str
        The branch the release is built from.
    time : datetime or None
        When the release was built. None suppresses all time output.
    extra : dict[str, str]
        Additional key/value pairs. Never contains reserved keys.
    """

    version: str = ""
    revision: str = ""
    branch: str = ""
    time: datetime | None = None
    extra: dict[str, str] = Field(default_factory=dict)

    _python_version: str | None = PrivateAttr(default=None)

    @classmethod
    def new(cls, version: str = "", *, distribution: str | None = None) -> "BuildInfo":
        """Create a BuildInfo with ``version``.

        When ``distribution`` is given, its installed metadata fills the
        version and revision that were not supplied explicitly. Missing
        distribution metadata is not an error; the fields stay empty.

        Parameters
        ----------
        version : str, optional
            Version of the release, by default empty.
        distribution : str, optional
            Name of the installed distribution to read metadata from.

        Returns
        -------
        BuildInfo
            The new record.
        """
        fields: dict[str, Any] = {KEY_VERSION: version}

        if distribution is not None:
            try:
                info = read_embedded(distribution)
            except NotAvailableError as exc:
                logger.debug(f"Using explicit build information only: {exc}")
            else:
                if not version:
                    fields[KEY_VERSION] = info.main.version
                fields[KEY_REVISION] = info.setting(SETTING_VCS_REVISION)

        return cls(**fields)

    @classmethod
    def from_json(cls, data: str | bytes) -> "BuildInfo":
        """Decode a JSON object into a new BuildInfo.

        Unknown keys with non-empty string values are added to ``extra``.
        Empty values are treated as absent. ``date`` is accepted as an alias
        of ``time``.

        Raises
        ------
        MalformedInputError
            If ``data`` is not a JSON object or holds invalid field values.
        """
        try:
            payload = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedInputError(f"invalid build info JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise MalformedInputError(
                f"build info JSON must be an object, got {type(payload).__name__}"
            )

        try:
            return cls.model_validate(payload, context={_DECODING: True})
        except ValidationError as exc:
            raise MalformedInputError(f"invalid build info: {exc}") from exc

    @model_validator(mode="before")
    @classmethod
    def _fold_unknown_keys(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, Mapping):
            return data

        decoding = bool(info.context and info.context.get(_DECODING))
        fields: dict[str, Any] = {}
        extra: dict[str, Any] = {}

        # Decoded input may nest entries under "extra"; they are filtered like
        # top-level unknown keys. Constructor input is validated as given.
        nested = data.get("extra")
        if isinstance(nested, Mapping):
            if decoding:
                for key, value in nested.items():
                    _fold_unknown(extra, key, value)
            else:
                extra.update(nested)

        for key, value in data.items():
            if key in _FIELD_KEYS:
                fields[key] = value
            elif key == "extra" and isinstance(nested, Mapping):
                continue
            elif key == KEY_DATE:
                if data.get(KEY_TIME) in (None, ""):
                    fields[KEY_TIME] = value
            else:
                _fold_unknown(extra, key, value)

        fields["extra"] = {k: v for k, v in extra.items() if v != ""}

        return fields

    @field_validator(KEY_TIME, mode="before")
    @classmethod
    def _parse_time(cls, value: Any) -> Any:
        if value == "":
            return None
        if isinstance(value, str):
            return parse_time(value)

        return value

    @field_validator(KEY_TIME)
    @classmethod
    def _ensure_aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)

        return value

    @field_validator("extra")
    @classmethod
    def _reject_reserved(cls, value: dict[str, str]) -> dict[str, str]:
        for key in value:
            if is_reserved(key):
                raise InvalidArgumentError(f"key '{key}' is reserved")

        return value

    @property
    def python_version(self) -> str:
        """Version of the Python interpreter running this build.

        Computed on first access and cached for the lifetime of the record.
        """
        if self._python_version is None:
            with _python_version_lock:
                if self._python_version is None:
                    self._python_version = platform.python_version()

        return self._python_version

    def time_string(self) -> str:
        """Return the build time in RFC 3339 format, or ``""`` when unset."""
        if self.time is None:
            return ""

        return format_time(self.time)

    def with_extra(self, key: str, value: str) -> "BuildInfo":
        """Add an extra key/value pair and return the record.

        Raises
        ------
        InvalidArgumentError
            If ``key`` is reserved or ``value`` is not a string.
        """
        if is_reserved(key):
            raise InvalidArgumentError(f"key '{key}' is reserved")
        if not isinstance(value, str):
            raise InvalidArgumentError(
                f"value of key '{key}' must be a string, got {type(value).__name__}"
            )

        self.extra[key] = value

        return self

    def map(self) -> dict[str, str]:
        """Return the build information as an ordered mapping.

        The mapping is suitable as a set of metric labels. ``version`` and
        ``python_version`` are always present, other fields only when set,
        followed by all extra entries.
        """
        result = {
            KEY_VERSION: self.version or EMPTY_VERSION,
            KEY_PYTHON_VERSION: self.python_version,
        }
        if self.revision:
            result[KEY_REVISION] = self.revision
        if self.branch:
            result[KEY_BRANCH] = self.branch
        if self.time is not None:
            result[KEY_TIME] = self.time_string()

        result.update(self.extra)

        return result

    @model_serializer(mode="plain")
    def _serialize(self) -> dict[str, str]:
        result = {KEY_VERSION: self.version or EMPTY_VERSION}
        if self.revision:
            result[KEY_REVISION] = self.revision
        if self.branch:
            result[KEY_BRANCH] = self.branch
        if self.time is not None:
            result[KEY_TIME] = self.time_string()

        result[KEY_PYTHON_VERSION] = self.python_version
        result.update(self.extra)

        return result

    def to_json(self) -> str:
        """Return the canonical, compact JSON encoding."""
        return self.model_dump_json()

    def __str__(self) -> str:
        if not self.revision and self.time is None:
            return self.version

        parts = [self.version]
        if self.revision:
            parts.append(self.revision)
        if self.time is not None:
            parts.append(f"({self.time_string()})")

        return " ".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BuildInfo):
            return NotImplemented

        return (
            self.version == other.version
            and self.revision == other.revision
            and self.branch == other.branch
            and self.time == other.time
            and self.extra == other.extra
        )


def add_version_flag(parser: argparse.ArgumentParser, bld: BuildInfo) -> None:
    """Register ``-v/--version`` on ``parser`` to print ``bld`` and exit."""
    parser.add_argument(
        f"-{SHORT_FLAG}",
        f"--{LONG_FLAG}",
        action="version",
        version=str(bld),
        help="Display build version information",
    )

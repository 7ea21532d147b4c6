"""Render version tags through field selectors or templates."""

from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime

from jinja2 import Environment, StrictUndefined, TemplateError, meta
from packaging.version import InvalidVersion, Version

from buildinfo.core.exceptions import InvalidArgumentError, MalformedInputError
from buildinfo.features.metadata.models import format_time
from buildinfo.features.tag import git

DetailsFunc = Callable[[str], Awaitable[tuple[str, datetime]]]

_env = Environment(undefined=StrictUndefined, keep_trailing_newline=True)


class TagVersion:
    """A version tag parsed into its release components."""

    def __init__(self, original: str, version: Version):
        self._original = original
        self._version = version

    @classmethod
    def parse(cls, tag: str) -> "TagVersion":
        """Parse ``tag``, e.g. ``v1.2.3`` or ``1.2.3-rc.1``.

        Raises
        ------
        MalformedInputError
            If ``tag`` is not a valid version.
        """
        try:
            return cls(tag, Version(tag))
        except InvalidVersion as exc:
            raise MalformedInputError(f"invalid version tag '{tag}'") from exc

    @property
    def original(self) -> str:
        return self._original

    @property
    def full(self) -> str:
        """Normalized version including pre-release and local metadata."""
        return str(self._version)

    @property
    def major(self) -> int:
        return self._version.major

    @property
    def minor(self) -> int:
        return self._version.minor

    @property
    def patch(self) -> int:
        return self._version.micro

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def major_minor(self) -> str:
        return f"{self.major}.{self.minor}"

    @property
    def prerelease(self) -> str:
        pre = self._version.pre
        return f"{pre[0]}{pre[1]}" if pre else ""

    @property
    def metadata(self) -> str:
        return self._version.local or ""

    def inc_major(self) -> str:
        return f"{self.major + 1}.0.0"

    def inc_minor(self) -> str:
        return f"{self.major}.{self.minor + 1}.0"

    def inc_patch(self) -> str:
        # A pre-release of x.y.z increments to its release x.y.z.
        if self._version.is_prerelease:
            return self.version

        return f"{self.major}.{self.minor}.{self.patch + 1}"


class TagState:
    """A tag version with lazily fetched revision and commit time.

    The details are fetched at most once, on the first request for either of
    them.
    """

    def __init__(self, version: TagVersion, details: DetailsFunc | None = None):
        self.version = version
        self._details = details or git.tag_details
        self._revision: str | None = None
        self._time: datetime | None = None

    async def _fetch(self) -> None:
        if self._revision is None:
            self._revision, self._time = await self._details(self.version.original)

    async def revision(self) -> str:
        await self._fetch()
        return self._revision or ""

    async def time(self) -> datetime | None:
        await self._fetch()
        return self._time


def _static(func: Callable[[TagVersion], object]):
    async def resolve(state: TagState) -> str:
        return str(func(state.version))

    return resolve


async def _revision(state: TagState) -> str:
    return await state.revision()


async def _time(state: TagState) -> str:
    value = await state.time()
    return format_time(value) if value is not None else ""


FIELD_SELECTORS: dict[str, Callable[[TagState], Awaitable[str]]] = {
    "original": _static(lambda v: v.original),
    "full": _static(lambda v: v.full),
    "version": _static(lambda v: v.version),
    "major.minor.patch": _static(lambda v: v.version),
    "major.minor": _static(lambda v: v.major_minor),
    "major": _static(lambda v: v.major),
    "minor": _static(lambda v: v.minor),
    "patch": _static(lambda v: v.patch),
    "+major": _static(lambda v: v.inc_major()),
    "+minor": _static(lambda v: v.inc_minor()),
    "+patch": _static(lambda v: v.inc_patch()),
    "revision": _revision,
    "rev": _revision,
    "time": _time,
}

# Variables that require fetching the tag details.
DETAIL_VARIABLES = frozenset({"revision", "time"})


def is_template(arg: str) -> bool:
    """Return True when ``arg`` contains template delimiters."""
    return "{{" in arg and "}}" in arg


async def render_fields(state: TagState, args: Sequence[str]) -> str:
    """Resolve each field selector in ``args`` and join them with a space.

    All selectors are validated before any of them is resolved. Empty
    arguments are skipped.

    Raises
    ------
    InvalidArgumentError
        If an argument is not a known field selector.
    """
    selectors = []
    for arg in args:
        if not arg:
            continue

        resolver = FIELD_SELECTORS.get(arg.lower())
        if resolver is None:
            raise InvalidArgumentError(f"Invalid argument `{arg}`")

        selectors.append(resolver)

    return " ".join([await resolve(state) for resolve in selectors])


async def render_template(state: TagState, source: str) -> str:
    """Render ``source`` as a jinja2 template with the tag's fields.

    Revision and time are only fetched when the template uses them.

    Raises
    ------
    MalformedInputError
        If the template is invalid or uses an unknown variable.
    """
    try:
        parsed = _env.parse(source)
        template = _env.from_string(source)
    except TemplateError as exc:
        raise MalformedInputError(f"invalid template: {exc}") from exc

    v = state.version
    context: dict[str, object] = {
        "original": v.original,
        "full": v.full,
        "version": v.version,
        "major_minor": v.major_minor,
        "major": v.major,
        "minor": v.minor,
        "patch": v.patch,
        "prerelease": v.prerelease,
        "metadata": v.metadata,
        "inc_major": v.inc_major(),
        "inc_minor": v.inc_minor(),
        "inc_patch": v.inc_patch(),
    }

    if meta.find_undeclared_variables(parsed) & DETAIL_VARIABLES:
        context["revision"] = await state.revision()
        context["time"] = await _time(state)

    try:
        return template.render(context)
    except TemplateError as exc:
        raise MalformedInputError(f"cannot render template: {exc}") from exc

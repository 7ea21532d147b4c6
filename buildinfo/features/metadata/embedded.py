"""Read build metadata embedded in an installed distribution.

This is the interpreter-side counterpart of build information a compiler
embeds into a binary: the distribution's own name and version, the versions
of its installed requirements and, when the distribution was installed from a
version control system, the PEP 610 ``direct_url.json`` details.
"""

import json
import platform
from importlib import metadata as importlib_metadata

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name
from pydantic import BaseModel, ConfigDict, Field

from buildinfo.core.exceptions import NotAvailableError
from buildinfo.core.logger import _setup_custom_logger

logger = _setup_custom_logger(__name__)

MAIN_MODULE = "main"

SETTING_PYTHON = "python"
SETTING_VCS = "vcs"
SETTING_VCS_REVISION = "vcs.revision"
SETTING_VCS_REQUESTED_REVISION = "vcs.requested_revision"
SETTING_VCS_URL = "vcs.url"
SETTING_EDITABLE = "editable"

# Project-URL labels that point at the project's source, in order of preference.
SOURCE_URL_LABELS = ("source", "source code", "repository", "homepage")


class ModuleInfo(BaseModel):
    """An installed distribution: its path (source URL or name) and version."""

    model_config = ConfigDict(frozen=True)

    path: str
    version: str = ""


class Setting(BaseModel):
    """A single key/value build setting."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class EmbeddedInfo(BaseModel):
    """Build information read from an installed distribution."""

    model_config = ConfigDict(frozen=True)

    python_version: str
    main: ModuleInfo
    deps: list[ModuleInfo] = Field(default_factory=list)
    settings: list[Setting] = Field(default_factory=list)

    def setting(self, key: str) -> str:
        """Return the value of build setting ``key`` or ``""`` when not set."""
        for item in self.settings:
            if item.key == key:
                return item.value

        return ""

    def module(self, name: str) -> ModuleInfo | None:
        """Return the module descriptor with ``name``.

        ``"main"`` returns the main module. Dependencies are matched on their
        normalized distribution name. Unknown names return None.
        """
        if name == MAIN_MODULE:
            return self.main

        wanted = canonicalize_name(name)
        for dep in self.deps:
            if canonicalize_name(dep.path) == wanted:
                return dep

        return None

    def app_name(self) -> str:
        """Short application name derived from the main module path."""
        return app_name(self.main.path)


def app_name(path: str) -> str:
    """Return the last segment of a module path.

    Parameters
    ----------
    path : str
        Module path, e.g. ``github.com/acme/app`` or a source URL.

    Returns
    -------
    str
        The last path segment, or ``""`` when the path is empty or root.

    Examples
    --------
    >>> app_name("https://github.com/acme/app")
    'app'
    >>> app_name("/")
    ''
    """
    path = path.strip().rstrip("/")
    if not path:
        return ""

    return path.rsplit("/", 1)[-1]


def read_embedded(distribution: str) -> EmbeddedInfo:
    """Read the build information of an installed distribution.

    Parameters
    ----------
    distribution : str
        Name of the installed distribution.

    Returns
    -------
    EmbeddedInfo
        The distribution's build information.

    Raises
    ------
    NotAvailableError
        If the distribution is not installed.
    """
    try:
        dist = importlib_metadata.distribution(distribution)
    except importlib_metadata.PackageNotFoundError as exc:
        raise NotAvailableError(
            f"no build information available for distribution '{distribution}'"
        ) from exc

    meta = dist.metadata
    name = meta.get("Name") or distribution
    main = ModuleInfo(path=_source_url(meta) or name, version=dist.version or "")

    python_version = platform.python_version()
    settings = [Setting(key=SETTING_PYTHON, value=python_version)]
    settings.extend(_vcs_settings(dist))

    return EmbeddedInfo(
        python_version=python_version,
        main=main,
        deps=_dependencies(dist),
        settings=settings,
    )


def _source_url(meta) -> str:
    project_urls: dict[str, str] = {}
    for entry in meta.get_all("Project-URL") or []:
        label, _, url = entry.partition(",")
        project_urls[label.strip().lower()] = url.strip()

    for label in SOURCE_URL_LABELS:
        if project_urls.get(label):
            return project_urls[label]

    return meta.get("Home-page") or ""


def _vcs_settings(dist: importlib_metadata.Distribution) -> list[Setting]:
    """Extract version control settings from PEP 610 ``direct_url.json``."""
    raw = dist.read_text("direct_url.json")
    if not raw:
        return []

    try:
        direct_url = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning(f"Ignoring malformed direct_url.json of {dist.name}: {exc}")
        return []

    settings: list[Setting] = []
    vcs_info = direct_url.get("vcs_info") or {}

    if vcs_info.get("vcs"):
        settings.append(Setting(key=SETTING_VCS, value=vcs_info["vcs"]))
    if vcs_info.get("commit_id"):
        settings.append(Setting(key=SETTING_VCS_REVISION, value=vcs_info["commit_id"]))
    if vcs_info.get("requested_revision"):
        settings.append(
            Setting(
                key=SETTING_VCS_REQUESTED_REVISION,
                value=vcs_info["requested_revision"],
            )
        )
    if vcs_info and direct_url.get("url"):
        settings.append(Setting(key=SETTING_VCS_URL, value=direct_url["url"]))

    if (direct_url.get("dir_info") or {}).get("editable"):
        settings.append(Setting(key=SETTING_EDITABLE, value="true"))

    return settings


def _dependencies(dist: importlib_metadata.Distribution) -> list[ModuleInfo]:
    """Return the installed, unconditional requirements of ``dist``."""
    deps: list[ModuleInfo] = []
    seen: set[str] = set()

    for spec in dist.requires or []:
        try:
            req = Requirement(spec)
        except InvalidRequirement:
            logger.debug(f"Skipping unparsable requirement '{spec}' of {dist.name}")
            continue

        if req.marker is not None and not req.marker.evaluate({"extra": ""}):
            continue

        key = canonicalize_name(req.name)
        if key in seen:
            continue
        seen.add(key)

        try:
            version = importlib_metadata.version(req.name)
        except importlib_metadata.PackageNotFoundError:
            logger.debug(f"Requirement '{req.name}' of {dist.name} is not installed")
            continue

        deps.append(ModuleInfo(path=req.name, version=version))

    return deps

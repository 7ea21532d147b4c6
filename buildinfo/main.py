from fastapi import FastAPI

from buildinfo.core.config import settings
from buildinfo.core.logger import _setup_root_logger
from buildinfo.features.metadata.api import create_router
from buildinfo.features.metadata.models import EMPTY_VERSION, BuildInfo


def create_app(bld: BuildInfo | None = None) -> FastAPI:
    """Create an application exposing build information.

    Parameters
    ----------
    bld : BuildInfo, optional
        The build information to expose. By default it is read from the
        installed distribution configured in ``settings.distribution``.

    Returns
    -------
    FastAPI
        The application.
    """
    _setup_root_logger()

    if bld is None:
        bld = BuildInfo.new(distribution=settings.distribution)

    app = FastAPI(title="Build Information", version=bld.version or EMPTY_VERSION)
    app.include_router(create_router(bld))

    return app

from datetime import timezone
from email.utils import format_datetime

from fastapi import APIRouter, Response

from buildinfo.core.config import settings
from buildinfo.features.metadata.models import BuildInfo


def build_info_response(bld: BuildInfo) -> Response:
    """Write ``bld`` as a JSON response.

    The body is the canonical JSON encoding of the record. When the record has
    a build time, it is also sent as the ``Last-Modified`` header.

    Parameters
    ----------
    bld : BuildInfo
        The build information to respond with. It is only read.

    Returns
    -------
    Response
        The HTTP response.
    """
    headers = {}
    if bld.time is not None:
        headers["Last-Modified"] = format_datetime(
            bld.time.astimezone(timezone.utc), usegmt=True
        )

    return Response(
        content=bld.to_json(),
        media_type="application/json",
        headers=headers,
    )


def create_router(bld: BuildInfo, path: str | None = None) -> APIRouter:
    """Create a router serving ``bld`` on a single GET endpoint.

    Parameters
    ----------
    bld : BuildInfo
        The build information to expose.
    path : str, optional
        Route path, by default ``settings.endpoint_path``.

    Returns
    -------
    APIRouter
        The router to include in an application.
    """
    router = APIRouter(tags=["meta"])

    @router.get(path or settings.endpoint_path, response_class=Response)
    def get_build_info() -> Response:
        return build_info_response(bld)

    return router

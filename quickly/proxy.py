"""Image proxy processor: fetch from the origin, optionally resize, return bytes."""

import logging
from typing import List
from urllib.parse import quote

from fastapi import FastAPI, Request
from pydantic import BaseModel, Field

from .api import ServiceConfig, create_app
from .config import Settings
from .direct import OriginClient, run_blocking
from .errors import MissingPathError
from .params import ResizeRequest, parse_resize_request
from .processor import BaseProcessor, StatelessAction
from .transform import transform

logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"


class ImagePathParams(BaseModel):
    """Path parameters for the proxy route."""

    path: str = Field("", description="Image path relative to the upstream origin.")


def upstream_path(request: Request, path: str) -> str:
    """
    Return the image path as the client sent it, still percent-encoded.

    Escaped separators such as %2F or %3F stay escaped so they reach the
    origin unchanged.
    """
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return quote(path, safe="/")
    raw = raw_path.split(b"?", 1)[0].decode("latin-1")
    root_path = request.scope.get("root_path", "")
    if root_path and raw.startswith(root_path):
        raw = raw[len(root_path):]
    return raw.removeprefix("/")


class ImageProxyProcessor(BaseProcessor):
    """Processor exposing the on-the-fly image transformation route."""

    def __init__(self, settings: Settings, origin: OriginClient | None = None):
        self.settings = settings
        self.origin = origin or OriginClient(
            settings.upstream_uri,
            timeout=settings.upstream_timeout,
        )

    @property
    def name(self) -> str:
        return "quickly"

    def get_stateless_actions(self) -> List[StatelessAction]:
        return [
            StatelessAction(
                name="transform_image",
                path="/{path:path}",
                path_params_model=ImagePathParams,
                query_parser=parse_resize_request,
                include_request=True,
                handler=self.handle_transform_image,
                summary="Fetch an image from the origin and optionally resize it",
                description=(
                    "Downloads {upstream}/{path}. When width, height or fit is given the "
                    "image is resized and re-encoded, to `format` when it names jpg, jpeg, "
                    "png, gif or webp, otherwise to its original format. Malformed resize "
                    "parameters are ignored as a whole."
                ),
                tags=("images",),
                media_type=OCTET_STREAM,
            ),
        ]

    async def handle_transform_image(
        self, request: Request, path_params: ImagePathParams, query: ResizeRequest
    ) -> bytes:
        """Serve the origin image, transformed when the query asks for a resize."""

        if not path_params.path:
            raise MissingPathError("Request has no image path")

        buffer = await self.origin.fetch(upstream_path(request, path_params.path))

        if query.has_resize():
            result = await run_blocking(transform, buffer, query)
            logger.debug(
                "Transformed %s into %d bytes of %s", path_params.path, len(result.data), result.format
            )
            buffer = result.data

        return buffer

    async def shutdown(self) -> None:
        await self.origin.close()


def create_proxy_app(settings: Settings, origin: OriginClient | None = None) -> FastAPI:
    """Build the proxy application for the given settings."""

    config = ServiceConfig(
        description="On-the-fly image resizing in front of an upstream origin.",
        health_path=settings.health_path,
        compress=settings.compress,
        log_level=settings.log_level,
    )
    return create_app(ImageProxyProcessor(settings, origin), config)

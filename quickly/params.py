"""Interpretation of resize query parameters."""

import logging
import re
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

MAX_DIMENSION = 2**32 - 1

_DIGITS = re.compile(r"[0-9]+")


class FitType(str, Enum):
    """How the source maps onto the requested box when aspect ratios differ."""

    BOUNDS = "bounds"
    COVER = "cover"
    CROP = "crop"


class TargetFormat(Enum):
    """Encodings a client may request, valued by their Pillow format name."""

    JPEG = "JPEG"
    PNG = "PNG"
    GIF = "GIF"
    WEBP = "WEBP"

    @classmethod
    def from_extension(cls, extension: str | None) -> "TargetFormat | None":
        """Map a file extension onto a target format, ``None`` when unrecognized."""
        if extension is None:
            return None
        return _EXTENSIONS.get(extension)


_EXTENSIONS = {
    "jpg": TargetFormat.JPEG,
    "jpeg": TargetFormat.JPEG,
    "webp": TargetFormat.WEBP,
    "png": TargetFormat.PNG,
    "gif": TargetFormat.GIF,
}


class ResizeRequest(BaseModel):
    """Validated resize parameters for a single request."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    width: int | None = Field(None, gt=0, le=MAX_DIMENSION, description="Target width in pixels")
    height: int | None = Field(None, gt=0, le=MAX_DIMENSION, description="Target height in pixels")
    fit: FitType | None = Field(None, description="Fit policy (bounds, cover, crop)")
    format: str | None = Field(None, description="Target encoding extension (jpg, png, ...)")

    @field_validator("width", "height", mode="before")
    @classmethod
    def _digits_only(cls, value: Any) -> Any:
        # Only plain decimal digits; pydantic's lax mode would take "+5" or " 5".
        if isinstance(value, str):
            if not _DIGITS.fullmatch(value):
                raise ValueError(f"not an unsigned integer: {value!r}")
            return int(value)
        return value

    def has_resize(self) -> bool:
        return self.width is not None or self.height is not None or self.fit is not None

    def target_format(self) -> TargetFormat | None:
        return TargetFormat.from_extension(self.format)


def _query_fields(query: Mapping[str, str]) -> dict[str, str]:
    # Starlette's QueryParams keeps every value; a plain mapping has one per key.
    multi_items = getattr(query, "multi_items", None)
    items = multi_items() if multi_items is not None else list(query.items())

    fields: dict[str, str] = {}
    for key, value in items:
        if key in fields and key in ResizeRequest.model_fields:
            raise ValueError(f"duplicate parameter {key!r}")
        fields[key] = value
    return fields


def parse_resize_request(query: Mapping[str, str]) -> ResizeRequest:
    """
    Build a ResizeRequest from raw query parameters.

    Any invalid or repeated field discards the whole query: the result is
    then an all-unset request and the original image is served untouched.
    """

    try:
        return ResizeRequest.model_validate(_query_fields(query))
    except (ValidationError, ValueError) as exc:
        logger.debug("Ignoring query %s: %s", query, exc)
        return ResizeRequest()

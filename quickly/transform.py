"""Decode, resize and re-encode images with Pillow."""

import io
import logging
import math
from dataclasses import dataclass
from enum import Enum

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeError, EncodeError, TransformError
from .params import FitType, ResizeRequest

logger = logging.getLogger(__name__)

# Triangle filter for every scaling operation.
RESAMPLE = Image.Resampling.BILINEAR


class ResizeStrategy(Enum):
    """How the computed target size is applied to the decoded image."""

    KEEP = "keep"
    EXACT = "exact"
    FILL = "fill"


@dataclass(frozen=True)
class ResizePlan:
    strategy: ResizeStrategy
    size: tuple[int, int]


@dataclass(frozen=True)
class ImageBuffer:
    """
    Encoded image bytes.

    Attributes:
        data: The encoded bytes.
        format: Pillow format name of ``data`` (JPEG, PNG, ...).
    """

    data: bytes
    format: str


def _scale(value: float) -> int:
    """Round half up, never below one pixel."""
    return max(1, math.floor(value + 0.5))


def _within(source: tuple[int, int], width: int, height: int) -> tuple[int, int]:
    src_width, src_height = source
    ratio = min(width / src_width, height / src_height)
    return _scale(src_width * ratio), _scale(src_height * ratio)


def _cover(source: tuple[int, int], width: int, height: int) -> tuple[int, int]:
    # The larger requested side is replaced by a value scaled from the smaller
    # one; the result is not cropped back to the box.
    src_width, src_height = source
    if width > height:
        return _scale(height / src_height * width), height
    return width, _scale(width / src_width * height)


def plan_resize(
    fit: FitType | None,
    width: int | None,
    height: int | None,
    source: tuple[int, int],
) -> ResizePlan:
    """
    Select the resize strategy and output size for a request.

    A fit policy only applies when both dimensions are given; otherwise the
    plain resize rules for the dimensions present are used.
    """

    src_width, src_height = source

    if fit is not None and width is not None and height is not None:
        if fit is FitType.CROP:
            return ResizePlan(ResizeStrategy.FILL, (width, height))
        if fit is FitType.BOUNDS:
            return ResizePlan(ResizeStrategy.EXACT, _within(source, width, height))
        if fit is FitType.COVER:
            return ResizePlan(ResizeStrategy.EXACT, _cover(source, width, height))
        raise ValueError(f"Unhandled fit type: {fit!r}")

    if width is None and height is None:
        return ResizePlan(ResizeStrategy.KEEP, source)
    if height is None:
        return ResizePlan(ResizeStrategy.EXACT, (width, _scale(width / src_width * src_height)))
    if width is None:
        return ResizePlan(ResizeStrategy.EXACT, (_scale(height / src_height * src_width), height))
    return ResizePlan(ResizeStrategy.EXACT, (width, height))


def _decode(raw: bytes) -> Image.Image:
    # Pillow identifies the format from the byte signature, never a filename.
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (
        UnidentifiedImageError,
        OSError,
        SyntaxError,
        ValueError,
        Image.DecompressionBombError,
    ) as exc:
        raise DecodeError(f"Failed to decode image: {exc}") from exc
    return img


def _encode(img: Image.Image, format_name: str) -> bytes:
    buffer = io.BytesIO()
    try:
        img.save(buffer, format=format_name)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(f"Failed to encode {img.mode} image as {format_name}: {exc}") from exc
    return buffer.getvalue()


def _filterable(img: Image.Image) -> Image.Image:
    # Pillow silently falls back to nearest-neighbour for palette and bilevel
    # images, so those are expanded before scaling.
    if img.mode == "1":
        return img.convert("L")
    if img.mode == "PA" or (img.mode == "P" and "transparency" in img.info):
        return img.convert("RGBA")
    if img.mode == "P":
        return img.convert("RGB")
    return img


def _check_output_size(size: tuple[int, int]) -> None:
    # Same ceiling Pillow applies to decoded images before calling them a bomb.
    limit = Image.MAX_IMAGE_PIXELS
    if limit and size[0] * size[1] > 2 * limit:
        raise TransformError(f"Output size {size[0]}x{size[1]} exceeds {2 * limit} pixels")


def apply_plan(img: Image.Image, plan: ResizePlan) -> Image.Image:
    if plan.strategy is ResizeStrategy.KEEP:
        return img

    _check_output_size(plan.size)
    try:
        img = _filterable(img)
        if plan.strategy is ResizeStrategy.FILL:
            return ImageOps.fit(img, plan.size, method=RESAMPLE)
        return img.resize(plan.size, RESAMPLE)
    except (ValueError, OverflowError, MemoryError) as exc:
        raise TransformError(f"Failed to resize {img.size} image to {plan.size}: {exc}") from exc


def transform(raw: bytes, request: ResizeRequest) -> ImageBuffer:
    """
    Resize ``raw`` according to ``request`` and re-encode it.

    The destination encoding is the requested target format when it names a
    supported one, otherwise the format sniffed from ``raw``.

    Raises:
        DecodeError: ``raw`` is not a readable image.
        TransformError: the resize itself fails or the output would be too large.
        EncodeError: the resized image cannot be written in the destination format.
    """

    with _decode(raw) as img:
        src_format = img.format
        logger.debug("Processing image with format %s", src_format)
        logger.debug(
            "Resizing to width %s height %s fit %s", request.width, request.height, request.fit
        )

        plan = plan_resize(request.fit, request.width, request.height, img.size)
        resized = apply_plan(img, plan)

        target = request.target_format()
        dst_format = target.value if target is not None else src_format
        logger.debug("Writing as %s", dst_format)
        logger.debug(
            "Resized from %sx%s to %sx%s", img.width, img.height, resized.width, resized.height
        )

        return ImageBuffer(data=_encode(resized, dst_format), format=dst_format)

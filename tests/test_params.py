"""Tests for query parameter interpretation."""

import pytest
from fastapi.datastructures import QueryParams
from pydantic import ValidationError

from quickly.params import FitType, ResizeRequest, TargetFormat, parse_resize_request


def test_width_only():
    request = parse_resize_request({"width": "400"})

    assert request.width == 400
    assert request.height is None
    assert request.fit is None
    assert request.has_resize()


def test_all_fields():
    request = parse_resize_request(
        {"width": "200", "height": "100", "fit": "crop", "format": "webp"}
    )

    assert request == ResizeRequest(width=200, height=100, fit=FitType.CROP, format="webp")
    assert request.target_format() is TargetFormat.WEBP


def test_empty_query_has_no_resize():
    request = parse_resize_request({})

    assert request == ResizeRequest()
    assert not request.has_resize()


def test_fit_alone_counts_as_resize():
    assert parse_resize_request({"fit": "bounds"}).has_resize()


def test_format_alone_is_not_a_resize():
    request = parse_resize_request({"format": "png"})

    assert not request.has_resize()
    assert request.target_format() is TargetFormat.PNG


def test_unknown_keys_are_ignored():
    request = parse_resize_request({"width": "10", "quality": "80"})

    assert request == ResizeRequest(width=10)


def test_invalid_fit_discards_whole_query():
    """A bad fit value drops every field, including the valid width."""
    request = parse_resize_request({"fit": "Crop", "width": "10", "format": "png"})

    assert request == ResizeRequest()
    assert not request.has_resize()


@pytest.mark.parametrize("value", ["abc", "-5", "+5", "1.5", "", " 5", "0", "4294967296"])
def test_malformed_dimension_discards_whole_query(value):
    request = parse_resize_request({"width": value, "height": "10"})

    assert request == ResizeRequest()


def test_largest_unsigned_dimension_is_accepted():
    assert parse_resize_request({"height": "4294967295"}).height == 4294967295


def test_fit_is_case_sensitive():
    with pytest.raises(ValidationError):
        ResizeRequest(fit="Bounds")


def test_request_is_immutable():
    request = ResizeRequest(width=10)

    with pytest.raises(ValidationError):
        request.width = 20


@pytest.mark.parametrize(
    "extension, expected",
    [
        ("jpg", TargetFormat.JPEG),
        ("jpeg", TargetFormat.JPEG),
        ("png", TargetFormat.PNG),
        ("gif", TargetFormat.GIF),
        ("webp", TargetFormat.WEBP),
        ("JPG", None),
        ("tiff", None),
        (None, None),
    ],
)
def test_target_format_from_extension(extension, expected):
    assert TargetFormat.from_extension(extension) is expected


def test_repeated_parameter_discards_whole_query():
    request = parse_resize_request(QueryParams("width=10&width=20&height=5"))

    assert request == ResizeRequest()


def test_repeated_unknown_parameter_is_ignored():
    request = parse_resize_request(QueryParams("quality=1&quality=2&width=5"))

    assert request == ResizeRequest(width=5)


def test_single_valued_query_params():
    request = parse_resize_request(QueryParams("width=10&fit=cover&height=20"))

    assert request == ResizeRequest(width=10, height=20, fit=FitType.COVER)

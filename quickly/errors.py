"""Error taxonomy for the image proxy pipeline."""


class ServiceError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    The message passed to the constructor is internal detail and is only
    logged; clients receive ``public_message``.
    """

    status_code: int = 500
    public_message: str = "Internal server error"


class MissingPathError(ServiceError):
    """The request did not name an image path."""

    status_code = 422
    public_message = "Missing image path"


class FetchError(ServiceError):
    """The origin could not be reached or answered with a non-success status."""

    status_code = 502
    public_message = "Failed to fetch image from upstream"


class TransformError(ServiceError):
    """Decoding, resizing or encoding the image failed."""

    status_code = 500
    public_message = "Failed to transform image"


class DecodeError(TransformError):
    """Source bytes are corrupt or in an unsupported format."""


class EncodeError(TransformError):
    """Resized pixels cannot be written in the destination format."""

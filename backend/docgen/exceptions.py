class DocgenError(Exception):
    """Base exception for document pipeline errors."""

    status_code = 500

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class NotFoundError(DocgenError):
    """The primary record for a render does not exist."""

    status_code = 404


class ValidationError(DocgenError):
    """Request input is missing or malformed; raised before any rendering work."""

    status_code = 400


class DeliveryFailure(DocgenError):
    """The outbound mail provider rejected or failed the send."""

    status_code = 502


class AssetUnavailable(DocgenError):
    """An image could not be fetched or decoded. Handled inside the renderers."""


class PartialDataUnavailable(DocgenError):
    """A secondary entity could not be loaded. Handled inside the assembler."""

"""Errors raised while decoding LUT assets."""


class DecodeError(ValueError):
    """Raised when a LUT asset cannot be turned into a ColorCube."""

    pass


class UnsupportedExtension(DecodeError):
    """Raised when the asset extension has no registered decoder."""

    pass


class TruncatedData(DecodeError):
    """Raised when the payload is shorter than its layout requires."""

    pass


class SizeMismatch(DecodeError):
    """Raised when the sample count or image shape does not describe a cube."""

    pass


class InvalidHeader(DecodeError):
    """Raised when a header is missing, unreadable or out of range."""

    pass

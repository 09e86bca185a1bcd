class RtpFormatError(Exception):
    """Base class for payload format resolution errors."""


class UnsupportedMediaType(RtpFormatError, ValueError):
    """The RTP media encoding is not one of the recognized encodings."""

    def __init__(self, media_type: str):
        super().__init__(f"Unsupported RTP media type: {media_type}")
        self.media_type = media_type


class InvalidArgument(RtpFormatError, ValueError):
    """A function was called with an argument outside its contract."""

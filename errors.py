class HuffError(ValueError):
    """Base class for errors raised while decoding a compressed stream."""


class FormatError(HuffError):
    """The stream does not start with the expected magic number.

    :ivar value: The 32-bit value found instead, or ``-1`` when the stream
                 ended before 32 bits could be read.
    :type value: int
    """

    def __init__(self, value: int):
        self.value = value
        if value < 0:
            message = "Stream too short to hold a magic number"
        else:
            message = f"Illegal header starts with 0x{value:08x}"
        super().__init__(message)


class CorruptHeaderError(HuffError):
    """The serialized tree header is malformed or truncated."""


class TruncatedStreamError(HuffError):
    """The encoded body ended before the end-of-stream code was read."""

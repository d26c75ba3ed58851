"""Tape Loop - error taxonomy.

Every failure is structural and deterministic. Nothing here is retryable.
"""


class TapeError(ValueError):
    code = "E_TAPE"


class FormatError(TapeError):
    """Chunk stream is not a well-formed PNG."""
    code = "E_FORMAT"


class NotAPng(FormatError):
    code = "E_NOT_PNG"


BadSignature = NotAPng


class UnexpectedEnd(FormatError):
    code = "E_TRUNCATED"


class CrcMismatch(FormatError):
    code = "E_CRC_MISMATCH"

    def __init__(self, message: str, offset: int = -1):
        super().__init__(message)
        self.offset = offset


class NoTerminalChunk(TapeError):
    code = "E_NO_IEND"


class PayloadNotFound(TapeError):
    code = "E_NO_PAYLOAD"


class CorruptPayload(TapeError):
    code = "E_PAYLOAD_JSON"

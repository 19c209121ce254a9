from __future__ import annotations


class ShotCodecError(ValueError):
    """Base class for errors raised while decoding a shot string."""


class MalformedInputError(ShotCodecError):
    """Encoded text is not a well-formed group of 4-character blocks."""


class TruncatedRecordError(ShotCodecError):
    """Fewer bytes than a full shot record were supplied."""

    def __init__(self, got: int, need: int):
        super().__init__(f"shot record needs {need} bytes, got {got}")
        self.got = got
        self.need = need

"""Error kinds raised by the order list core."""

from __future__ import annotations


class ParseError(ValueError):
    """Raised when viewSize/viewIndex are not usable integers."""

    def __init__(self, raw_size: object, raw_index: object, reason: str) -> None:
        super().__init__(reason)
        self.raw_size = raw_size
        self.raw_index = raw_index
        self.reason = reason


class StorageError(RuntimeError):
    """Raised when the order store fails while a page is fetched."""

    def __init__(self, message: str, *, stage: str) -> None:
        super().__init__(f"{message} (stage={stage})")
        self.stage = stage

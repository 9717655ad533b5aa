"""Exception types raised by livefile."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for store, loader and registry failures."""


class UnsupportedCodecError(StoreError):
    """Raised when a codec whose backing library is missing is used."""

    def __init__(self, codec_name: str, library: str):
        super().__init__(
            f"codec {codec_name!r} is unsupported: backing library {library!r} is not installed"
        )
        self.codec_name = codec_name
        self.library = library


class FlushError(StoreError):
    """Raised by flush_all() when one or more stores could not be written."""

    def __init__(self, failures: dict[str, BaseException]):
        paths = ", ".join(sorted(failures))
        super().__init__(f"shutdown flush failed for {len(failures)} store(s): {paths}")
        self.failures = failures

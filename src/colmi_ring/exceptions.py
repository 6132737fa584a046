"""Exceptions raised by the colmi-ring package."""

from __future__ import annotations


class ColmiRingError(Exception):
    """Base class for all colmi-ring errors."""


class BLEConnectionError(ColmiRingError):
    """Raised when the BLE connection cannot be established or used."""


class DisconnectedError(BLEConnectionError):
    """Raised for pending operations when the ring disconnects mid-exchange."""


class BLETimeoutError(ColmiRingError):
    """Raised when the ring does not answer within the deadline."""


class ProtocolError(ColmiRingError):
    """Raised when the ring's responses don't follow the expected protocol."""


class InvalidFrameError(ProtocolError):
    """Raised for buffers that are not exactly one 16-byte packet."""


class ChecksumMismatchError(ProtocolError):
    """Raised by strict checksum verification.

    The ring's checksum is advisory: decoding never raises this on its own.
    """

    def __init__(self, expected: int, got: int) -> None:
        self.expected = expected
        self.got = got
        super().__init__(
            f"Checksum mismatch: expected 0x{expected:02x}, got 0x{got:02x}"
        )


class DeviceReportedError(ProtocolError):
    """Raised when the ring answers with a non-zero error code."""

    def __init__(self, kind: object, code: int) -> None:
        self.kind = kind
        self.code = code
        name = getattr(kind, "name", kind)
        super().__init__(f"Ring reported error code 0x{code:02x} for {name}")


class NoDataError(ProtocolError):
    """Raised when the ring reports that it has nothing for the query."""


class IncompleteReassemblyError(ProtocolError):
    """Raised when a multi-packet response ends without a usable result."""


class PreconditionViolationError(ColmiRingError, ValueError):
    """Raised for out-of-range arguments, before anything is sent."""

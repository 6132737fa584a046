"""Fixed-size packet framing for the ring's command protocol.

Every message in either direction is exactly 16 bytes:

    [0]      Command tag
    [1..14]  Payload (zero-filled)
    [15]     Checksum = sum(bytes 0..14) & 0xFF
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..exceptions import ChecksumMismatchError, InvalidFrameError, PreconditionViolationError

_LOGGER = logging.getLogger(__name__)

PACKET_SIZE = 16
PAYLOAD_SIZE = PACKET_SIZE - 2


def checksum(data: bytes | bytearray) -> int:
    """Calculate the packet checksum: sum of the first 15 bytes mod 256."""
    return sum(data[:PACKET_SIZE - 1]) & 0xFF


@dataclass(frozen=True, slots=True)
class Packet:
    """One immutable 16-byte protocol frame.

    Use encode() or decode() to build instances.
    """

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != PACKET_SIZE:
            raise InvalidFrameError(
                f"Packet must be exactly {PACKET_SIZE} bytes, got {len(self.raw)}"
            )

    def __bytes__(self) -> bytes:
        return self.raw

    def __getitem__(self, index: int | slice) -> int | bytes:
        return self.raw[index]

    def __len__(self) -> int:
        return PACKET_SIZE

    @property
    def tag(self) -> int:
        """Command tag (byte 0)."""
        return self.raw[0]

    @property
    def subtype(self) -> int:
        """First payload byte, used by multi-packet responses."""
        return self.raw[1]

    @property
    def payload(self) -> bytes:
        """The 14 payload bytes."""
        return self.raw[1:PACKET_SIZE - 1]

    @property
    def checksum(self) -> int:
        return self.raw[PACKET_SIZE - 1]

    @property
    def checksum_valid(self) -> bool:
        return checksum(self.raw) == self.checksum

    def __repr__(self) -> str:
        return f"Packet(tag={self.tag}, raw={self.raw.hex()})"


def encode(tag: int, payload: bytes | bytearray | list[int] = b"") -> Packet:
    """Build a command packet.

    Args:
        tag: Command tag (0-255)
        payload: Up to 14 payload bytes, zero-filled to 14

    Returns:
        Packet with checksum appended

    Raises:
        PreconditionViolationError: If tag or payload are out of range
    """
    if not 0 <= tag <= 0xFF:
        raise PreconditionViolationError(f"tag out of range: {tag} (must be 0-255)")
    if len(payload) > PAYLOAD_SIZE:
        raise PreconditionViolationError(
            f"Payload too long: {len(payload)} bytes (max {PAYLOAD_SIZE})"
        )

    frame = bytearray(PACKET_SIZE)
    frame[0] = tag
    try:
        frame[1:1 + len(payload)] = bytes(payload)
    except ValueError as e:
        raise PreconditionViolationError(f"Invalid payload byte: {e}") from e
    frame[PACKET_SIZE - 1] = checksum(frame)
    return Packet(bytes(frame))


def decode(data: bytes | bytearray) -> Packet:
    """Wrap a received buffer as a Packet.

    A checksum mismatch is only logged: the ring's own checksums are not
    reliable enough to reject frames on.

    Raises:
        InvalidFrameError: If data is not exactly 16 bytes
    """
    if len(data) != PACKET_SIZE:
        raise InvalidFrameError(
            f"Packet must be exactly {PACKET_SIZE} bytes, got {len(data)}"
        )

    packet = Packet(bytes(data))
    if not packet.checksum_valid:
        _LOGGER.debug(
            "Checksum mismatch on packet %s (expected 0x%02x)",
            packet.raw.hex(),
            checksum(packet.raw),
        )
    return packet


def verify_checksum(packet: Packet) -> None:
    """Strict checksum check for callers that want it.

    Raises:
        ChecksumMismatchError: If the checksum byte is wrong
    """
    expected = checksum(packet.raw)
    if expected != packet.checksum:
        raise ChecksumMismatchError(expected, packet.checksum)


def byte_to_bcd(value: int) -> int:
    """Encode 0-99 as binary-coded decimal (23 -> 0x23)."""
    if not 0 <= value <= 99:
        raise PreconditionViolationError(f"BCD value out of range: {value} (must be 0-99)")
    return ((value // 10) << 4) | (value % 10)


def bcd_to_decimal(value: int) -> int:
    """Decode a binary-coded decimal byte (0x23 -> 23)."""
    return ((value >> 4) & 0x0F) * 10 + (value & 0x0F)

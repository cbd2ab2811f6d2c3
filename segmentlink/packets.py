"""Wire format of the segment transfer protocol: data, ACK and reject packets."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

PORT = 8081
START_PACKET_ID = 0xFFFF
END_PACKET_ID = 0xFFFF
CLIENT_ID = 0xFF
MAX_PAYLOAD = 255
MAX_CLIENT_ID = 255
ACK_TIMEOUT = 3.0
MAX_TRIES = 3

# Little-endian layouts with the same alignment padding as the packets on the wire.
_DATA = struct.Struct("<HBxHBB255sxH")
_ACK = struct.Struct("<HBxHBxH")
_REJECT = struct.Struct("<HBxHHBxH")
_TYPE_FIELD = struct.Struct("<H")
_TYPE_OFFSET = 4

DATA_PACKET_SIZE = _DATA.size
ACK_PACKET_SIZE = _ACK.size
REJECT_PACKET_SIZE = _REJECT.size


class ProtocolError(ValueError):
    """Raised when a packet cannot be encoded or decoded."""


class PacketType(IntEnum):
    DATA = 0x0FF1
    ACK = 0xFFF2
    REJECT = 0xFFF3


class RejectCode(IntEnum):
    OUT_OF_SEQUENCE = 0xFFF4
    LENGTH_MISMATCH = 0xFFF5
    END_OF_PACKET_MISSING = 0xFFF6
    DUPLICATE_PACKET = 0xFFF7


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _pack(layout: struct.Struct, *values) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise ProtocolError(f"field out of range: {exc}") from exc


@dataclass
class DataPacket:
    """A packet carrying one line of payload."""

    seg_no: int
    payload: bytes = b""
    plen: int | None = None
    client_id: int = CLIENT_ID
    packet_type: int = PacketType.DATA
    start_id: int = START_PACKET_ID
    end_id: int = END_PACKET_ID

    def __post_init__(self) -> None:
        if self.plen is None:
            self.plen = len(self.payload)
        self.packet_type = _coerce(PacketType, self.packet_type)

    def to_bytes(self) -> bytes:
        if len(self.payload) > MAX_PAYLOAD:
            raise ProtocolError(f"payload longer than {MAX_PAYLOAD} bytes")
        if b"\0" in self.payload:
            raise ProtocolError("payload may not contain NUL bytes")
        return _pack(
            _DATA,
            self.start_id,
            self.client_id,
            self.packet_type,
            self.seg_no,
            self.plen,
            self.payload,
            self.end_id,
        )


@dataclass
class AckPacket:
    """Acknowledgement of a correctly received data packet."""

    seg_no: int
    client_id: int = CLIENT_ID
    start_id: int = START_PACKET_ID
    end_id: int = END_PACKET_ID
    packet_type: int = PacketType.ACK

    def to_bytes(self) -> bytes:
        return _pack(_ACK, self.start_id, self.client_id, self.packet_type, self.seg_no, self.end_id)


@dataclass
class RejectPacket:
    """Rejection of a data packet, with the reason in ``sub_code``."""

    sub_code: int
    seg_no: int
    client_id: int = CLIENT_ID
    start_id: int = START_PACKET_ID
    end_id: int = END_PACKET_ID
    packet_type: int = PacketType.REJECT

    def __post_init__(self) -> None:
        self.sub_code = _coerce(RejectCode, self.sub_code)

    def to_bytes(self) -> bytes:
        return _pack(
            _REJECT,
            self.start_id,
            self.client_id,
            self.packet_type,
            self.sub_code,
            self.seg_no,
            self.end_id,
        )


Response = Union[AckPacket, RejectPacket]


def decode_data_packet(data: bytes) -> DataPacket:
    """Decode a data packet; the payload ends at the first NUL byte."""
    if len(data) != DATA_PACKET_SIZE:
        raise ProtocolError(f"data packet must be {DATA_PACKET_SIZE} bytes, got {len(data)}")
    start_id, client_id, packet_type, seg_no, plen, raw_payload, end_id = _DATA.unpack(data)
    payload = raw_payload.split(b"\0", 1)[0]
    return DataPacket(
        seg_no=seg_no,
        payload=payload,
        plen=plen,
        client_id=client_id,
        packet_type=packet_type,
        start_id=start_id,
        end_id=end_id,
    )


def decode_response(data: bytes) -> Response:
    """Decode a server reply, which is either an ACK or a reject packet."""
    if len(data) < _TYPE_OFFSET + _TYPE_FIELD.size:
        raise ProtocolError("response too short to carry a packet type")
    (packet_type,) = _TYPE_FIELD.unpack_from(data, _TYPE_OFFSET)
    if packet_type == PacketType.ACK:
        if len(data) < ACK_PACKET_SIZE:
            raise ProtocolError("truncated ACK packet")
        start_id, client_id, _, seg_no, end_id = _ACK.unpack_from(data)
        return AckPacket(seg_no=seg_no, client_id=client_id, start_id=start_id, end_id=end_id)
    if packet_type == PacketType.REJECT:
        if len(data) < REJECT_PACKET_SIZE:
            raise ProtocolError("truncated reject packet")
        start_id, client_id, _, sub_code, seg_no, end_id = _REJECT.unpack_from(data)
        return RejectPacket(
            sub_code=sub_code,
            seg_no=seg_no,
            client_id=client_id,
            start_id=start_id,
            end_id=end_id,
        )
    raise ProtocolError(f"unknown response packet type {packet_type:#x}")


def format_data_packet(packet: DataPacket) -> str:
    """Render a data packet as the multi-line listing shown on the console."""
    payload = packet.payload.decode("utf-8", errors="replace")
    return "\n".join(
        [
            f"Start Packet ID -  {packet.start_id:x}",
            f"Client ID -  {packet.client_id:x}",
            f"Packet Type -  {int(packet.packet_type):x}",
            f"Segment # -  {packet.seg_no}",
            f"Payload Length -  {packet.plen}",
            f"Payload -  {payload}",
            f"End Packet ID -  {packet.end_id:x}",
        ]
    )
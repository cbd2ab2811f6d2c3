"""Wire format of the access permission protocol."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from segmentlink.packets import CLIENT_ID, END_PACKET_ID, START_PACKET_ID, ProtocolError

# Little-endian layout with the alignment padding used on the wire.
_PERMISSION = struct.Struct("<HBxHBBB7xQH6x")

PERMISSION_PACKET_SIZE = _PERMISSION.size


class Permission(IntEnum):
    ACCESS_PERM = 0xFFF8
    NOT_PAID = 0xFFF9
    NOT_EXIST = 0xFFFA
    ACCESS_OK = 0xFFFB


class Technology(IntEnum):
    TECH_2G = 2
    TECH_3G = 3
    TECH_4G = 4
    TECH_5G = 5


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class PermissionPacket:
    """A request for access, or the server's verdict on one."""

    seg_no: int
    subscriber_number: int
    technology: int
    plen: int = 0
    permission: int = Permission.ACCESS_PERM
    client_id: int = CLIENT_ID
    start_id: int = START_PACKET_ID
    end_id: int = END_PACKET_ID

    def __post_init__(self) -> None:
        self.permission = _coerce(Permission, self.permission)
        self.technology = _coerce(Technology, self.technology)

    def to_bytes(self) -> bytes:
        try:
            return _PERMISSION.pack(
                self.start_id,
                self.client_id,
                self.permission,
                self.seg_no,
                self.plen,
                self.technology,
                self.subscriber_number,
                self.end_id,
            )
        except struct.error as exc:
            raise ProtocolError(f"field out of range: {exc}") from exc


def decode_permission_packet(data: bytes) -> PermissionPacket:
    """Decode a permission packet from its wire form."""
    if len(data) != PERMISSION_PACKET_SIZE:
        raise ProtocolError(
            f"permission packet must be {PERMISSION_PACKET_SIZE} bytes, got {len(data)}"
        )
    start_id, client_id, permission, seg_no, plen, technology, number, end_id = _PERMISSION.unpack(data)
    return PermissionPacket(
        seg_no=seg_no,
        subscriber_number=number,
        technology=technology,
        plen=plen,
        permission=permission,
        client_id=client_id,
        start_id=start_id,
        end_id=end_id,
    )


def format_permission_packet(packet: PermissionPacket) -> str:
    """Render a permission packet as the multi-line listing shown on the console."""
    return "\n".join(
        [
            f"Start Packet ID: {packet.start_id:x}",
            f"Client ID: {packet.client_id:x}",
            f"Packet Type: {int(packet.permission):x}",
            f"Segment #: {packet.seg_no}",
            f"Payload Length: {packet.plen}",
            f"Technology: {int(packet.technology)}",
            f"Subscriber Number: {packet.subscriber_number}",
            f"End Packet ID: {packet.end_id:x}",
        ]
    )
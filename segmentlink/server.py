"""UDP server that checks data packets and answers with ACK or reject packets."""

from __future__ import annotations

import argparse
import socket
import sys
from collections import Counter
from typing import TextIO

from segmentlink.packets import (
    DATA_PACKET_SIZE,
    END_PACKET_ID,
    PORT,
    AckPacket,
    DataPacket,
    ProtocolError,
    RejectCode,
    RejectPacket,
    Response,
    decode_data_packet,
    format_data_packet,
)


class SequenceValidator:
    """Tracks expected segment numbers and judges each incoming data packet."""

    def __init__(self) -> None:
        self.expected = 1
        self._seen: Counter[int] = Counter()

    def _rejection(self, packet: DataPacket) -> RejectCode | None:
        if self._seen[packet.seg_no] != 1:
            return RejectCode.DUPLICATE_PACKET
        if packet.seg_no != self.expected:
            return RejectCode.OUT_OF_SEQUENCE
        if len(packet.payload) != packet.plen:
            return RejectCode.LENGTH_MISMATCH
        if packet.end_id != END_PACKET_ID:
            return RejectCode.END_OF_PACKET_MISSING
        return None

    def check(self, packet: DataPacket) -> Response:
        """Return the reply for ``packet``; the expected number always advances."""
        self._seen[packet.seg_no] += 1
        code = self._rejection(packet)
        self.expected += 1
        if code is None:
            return AckPacket(
                seg_no=packet.seg_no,
                client_id=packet.client_id,
                start_id=packet.start_id,
                end_id=packet.end_id,
            )
        return RejectPacket(
            sub_code=code,
            seg_no=packet.seg_no,
            client_id=packet.client_id,
            start_id=packet.start_id,
            end_id=packet.end_id,
        )


def run_server(sock, validator: SequenceValidator | None = None, out: TextIO | None = None) -> None:
    """Receive data packets on ``sock`` forever, replying to each sender."""
    if validator is None:
        validator = SequenceValidator()
    if out is None:
        out = sys.stdout
    while True:
        data, address = sock.recvfrom(DATA_PACKET_SIZE)
        try:
            packet = decode_data_packet(data)
        except ProtocolError as exc:
            print(f"ERROR - MALFORMED PACKET: {exc}", file=out)
            continue
        print(f"\n\n\n{format_data_packet(packet)}\n\n\n", file=out)
        response = validator.check(packet)
        sock.sendto(response.to_bytes(), address)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Serve the segment transfer protocol over UDP.")
    parser.add_argument("--host", default="0.0.0.0", help="address to bind")
    parser.add_argument("--port", type=int, default=PORT, help="UDP port to listen on")
    args = parser.parse_args(argv)
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as exc:
        print(f"ERROR - THE SOCKET COULD NOT BE CREATED: {exc}", file=sys.stderr)
        return 1
    with sock:
        sock.bind((args.host, args.port))
        try:
            run_server(sock)
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
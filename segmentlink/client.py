"""UDP client that sends ten data packets and reports each server reply.

Packets 7 to 10 are deliberately damaged so that every reject reason of the
protocol is exercised: an out-of-sequence segment number, a length mismatch,
a missing end identifier and a duplicate segment number.
"""

from __future__ import annotations

import argparse
import socket
import sys
from collections.abc import Iterable, Iterator
from typing import TextIO

from segmentlink.packets import (
    ACK_TIMEOUT,
    END_PACKET_ID,
    MAX_PAYLOAD,
    MAX_TRIES,
    PORT,
    REJECT_PACKET_SIZE,
    AckPacket,
    DataPacket,
    ProtocolError,
    RejectCode,
    RejectPacket,
    Response,
    decode_response,
    format_data_packet,
)

PACKET_COUNT = 10
OUT_OF_SEQUENCE_SEQ_NO = 7
LENGTH_MISMATCH_SEQ_NO = 8
NO_END_PACKET_ID_SEQ_NO = 9
DUPLICATE_PACKET_SEQ_NO = 10

_OUT_OF_SEQUENCE_SHIFT = 8
_LENGTH_MISMATCH_EXTRA = 6
_LINE_CHUNK = MAX_PAYLOAD - 1

_REJECT_REASONS = {
    RejectCode.OUT_OF_SEQUENCE: "OUT OF SEQUENCE PACKET SENT.",
    RejectCode.LENGTH_MISMATCH: "LENGTH MIS-MATCH PACKET SENT.",
    RejectCode.END_OF_PACKET_MISSING: "END OF PACKET ID MISSING.",
    RejectCode.DUPLICATE_PACKET: "DUPLICATE PACKET SENT.",
}


class ServerNotResponding(ConnectionError):
    """Raised when no reply arrives after the allowed number of tries."""


def _chunks(lines: Iterable[str | bytes]) -> Iterator[bytes]:
    """Yield payload pieces the way a 255-byte line buffer would read them."""
    for line in lines:
        data = line.encode("utf-8") if isinstance(line, str) else bytes(line)
        while len(data) > _LINE_CHUNK:
            yield data[:_LINE_CHUNK]
            data = data[_LINE_CHUNK:]
        if data:
            yield data


def build_packets(lines: Iterable[str | bytes]) -> list[DataPacket]:
    """Build the ten data packets, reusing the last payload once input runs out."""
    pieces = _chunks(lines)
    payload = b""
    packets = []
    for seq_no in range(1, PACKET_COUNT + 1):
        payload = next(pieces, payload).split(b"\0", 1)[0]
        packet = DataPacket(seg_no=seq_no, payload=payload)
        if seq_no == OUT_OF_SEQUENCE_SEQ_NO:
            packet.seg_no += _OUT_OF_SEQUENCE_SHIFT
        elif seq_no == LENGTH_MISMATCH_SEQ_NO:
            packet.plen = (packet.plen + _LENGTH_MISMATCH_EXTRA) & 0xFF
        elif seq_no == NO_END_PACKET_ID_SEQ_NO:
            packet.end_id = 0
        elif seq_no == DUPLICATE_PACKET_SEQ_NO:
            packet.seg_no = 1
        if seq_no != NO_END_PACKET_ID_SEQ_NO:
            packet.end_id = END_PACKET_ID
        packets.append(packet)
    return packets


def describe_response(response: Response, seq_no: int) -> str:
    """Return the console message for a server reply to packet ``seq_no``."""
    if isinstance(response, AckPacket):
        return f"ACK FOR PACKET# {seq_no} HAS BEEN SENT FROM SERVER"
    if isinstance(response, RejectPacket):
        reason = _REJECT_REASONS.get(response.sub_code)
        if reason is None:
            return ""
        return "\n\n".join(
            [
                "ERROR - REJECT PACKET RECEIVED.",
                f"REJECT PACKET SUB-CODE - {int(response.sub_code):x}.",
                reason,
            ]
        )
    return ""


def send_with_retries(
    sock,
    address,
    packet: DataPacket,
    seq_no: int,
    out: TextIO | None = None,
    max_tries: int = MAX_TRIES,
) -> Response | None:
    """Send ``packet`` until a reply arrives; raise after ``max_tries`` silent tries.

    Returns the decoded reply, or None when the reply could not be decoded.
    """
    if out is None:
        out = sys.stdout
    wire = packet.to_bytes()
    for _ in range(max_tries):
        print(f"\n\nPacket #{seq_no} sent.", file=out)
        print(format_data_packet(packet), file=out)
        try:
            sock.sendto(wire, address)
            data, _sender = sock.recvfrom(REJECT_PACKET_SIZE)
        except OSError:
            print("\n\nServer Response.", file=out)
            print("\nERROR - NO ACK RECEIVED FROM SERVER.", file=out)
            print("RE-TRANSMITTING THE PACKET.", file=out)
            continue
        print("\n\nServer Response.", file=out)
        try:
            response = decode_response(data)
        except ProtocolError as exc:
            print(f"\nERROR - MALFORMED RESPONSE: {exc}", file=out)
            return None
        message = describe_response(response, seq_no)
        if message:
            print(f"\n{message}", file=out)
        print("\n", file=out)
        return response
    raise ServerNotResponding(f"no reply to packet #{seq_no} after {max_tries} tries")


def run_client(
    sock,
    address,
    lines: Iterable[str | bytes],
    out: TextIO | None = None,
    max_tries: int = MAX_TRIES,
) -> list[Response | None]:
    """Send all ten packets in order and return the replies received."""
    if out is None:
        out = sys.stdout
    responses = []
    for seq_no, packet in enumerate(build_packets(lines), start=1):
        responses.append(send_with_retries(sock, address, packet, seq_no, out, max_tries))
        print("\n", file=out)
    return responses


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send payload lines with the segment transfer protocol.")
    parser.add_argument("--host", default="127.0.0.1", help="server address")
    parser.add_argument("--port", type=int, default=PORT, help="server UDP port")
    parser.add_argument("--payload", default="payload.txt", help="file holding one payload per line")
    parser.add_argument("--timeout", type=float, default=ACK_TIMEOUT, help="seconds to wait for a reply")
    parser.add_argument("--tries", type=int, default=MAX_TRIES, help="attempts per packet")
    args = parser.parse_args(argv)

    try:
        with open(args.payload, "rb") as handle:
            lines = handle.readlines()
    except OSError:
        print("\nERROR - FILE NOT FOUND", file=sys.stderr)
        return 1

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as exc:
        print(f"\nERROR - A SOCKET COULDN'T BE CREATED: {exc}", file=sys.stderr)
        return 1

    with sock:
        sock.settimeout(args.timeout)
        try:
            run_client(sock, (args.host, args.port), lines, max_tries=args.tries)
        except ServerNotResponding:
            print("\nERROR - SERVER NOT RESPONDING.")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
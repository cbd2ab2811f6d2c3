"""UDP client that asks the server whether subscribers may use the service."""

from __future__ import annotations

import argparse
import re
import socket
import sys
from collections.abc import Iterable, Iterator
from typing import TextIO

from segmentlink.client import ServerNotResponding
from segmentlink.packets import ACK_TIMEOUT, MAX_TRIES, PORT, ProtocolError
from segmentlink.permission import (
    PERMISSION_PACKET_SIZE,
    Permission,
    PermissionPacket,
    decode_permission_packet,
    format_permission_packet,
)

REQUEST_COUNT = 5

_LEADING_INT = re.compile(rb"\s*([+-]?\d+)")
_ULONG_MASK = (1 << 64) - 1

_MESSAGES = {
    Permission.NOT_PAID: "INFO - SUBSCRIBER {} HAS NOT PAID FOR THE SERVICE.",
    Permission.NOT_EXIST: "INFO - SUBSCRIBER {} DOESN'T EXIST ON THE SERVER.",
    Permission.ACCESS_OK: "INFO - SUBSCRIBER {} IS GRANTED PERMISSION FOR THE SERVICE",
}


def _leading_int(token: bytes) -> int:
    match = _LEADING_INT.match(token)
    return int(match.group(1)) if match else 0


def parse_request(line: str | bytes, seg_no: int) -> PermissionPacket:
    """Build an access request from a ``number technology`` line.

    The payload length is the byte length of the two fields as read,
    a trailing newline included.
    """
    data = line.encode("utf-8") if isinstance(line, str) else bytes(line)
    tokens = [token for token in data.split(b" ") if token]
    if len(tokens) < 2:
        raise ValueError(f"expected subscriber number and technology in {line!r}")
    number_token, technology_token = tokens[:2]
    return PermissionPacket(
        seg_no=seg_no,
        subscriber_number=_leading_int(number_token) & _ULONG_MASK,
        technology=_leading_int(technology_token) & 0xFF,
        plen=(len(number_token) + len(technology_token)) & 0xFF,
    )


def describe_response(response: PermissionPacket, subscriber_number: int) -> str:
    """Return the console message for the server's verdict."""
    template = _MESSAGES.get(response.permission)
    return template.format(subscriber_number) if template else ""


def _requests(lines: Iterable[str | bytes]) -> Iterator[tuple[int, PermissionPacket]]:
    """Yield the requests to send; once input runs out the last one is repeated."""
    source = iter(lines)
    packet = None
    for seq_no in range(1, REQUEST_COUNT + 1):
        line = next(source, None)
        if line is not None:
            packet = parse_request(line, seq_no)
        elif packet is None:
            raise ValueError("no subscriber lines to send")
        yield seq_no, packet


def _exchange(sock, address, packet: PermissionPacket, seq_no: int, out: TextIO, max_tries: int):
    wire = packet.to_bytes()
    for _ in range(max_tries):
        print(f"\nPacket #{seq_no} is sent", file=out)
        print(f"\n\n{format_permission_packet(packet)}", file=out)
        try:
            sock.sendto(wire, address)
            data, _sender = sock.recvfrom(PERMISSION_PACKET_SIZE)
        except OSError:
            print("\n\n\nERROR - NO ACK RECEIVED FROM SERVER.", file=out)
            print("RE-TRANSMITTING THE PACKET.", file=out)
            continue
        print("\n", file=out)
        try:
            response = decode_permission_packet(data)
        except ProtocolError as exc:
            print(f"\nERROR - MALFORMED RESPONSE: {exc}", file=out)
            return None
        message = describe_response(response, packet.subscriber_number)
        if message:
            print(f"\n{message}", file=out)
        return response
    raise ServerNotResponding(f"no reply to packet #{seq_no} after {max_tries} tries")


def run_client(
    sock,
    address,
    lines: Iterable[str | bytes],
    out: TextIO | None = None,
    max_tries: int = MAX_TRIES,
) -> list[PermissionPacket | None]:
    """Send the five access requests in order and return the replies."""
    if out is None:
        out = sys.stdout
    responses = []
    for seq_no, packet in _requests(lines):
        responses.append(_exchange(sock, address, packet, seq_no, out, max_tries))
        print("\n", file=out)
    return responses


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ask the server for subscriber access over UDP.")
    parser.add_argument("--host", default="127.0.0.1", help="server address")
    parser.add_argument("--port", type=int, default=PORT, help="server UDP port")
    parser.add_argument("--payload", default="payload.txt", help="file of 'number technology' lines")
    parser.add_argument("--timeout", type=float, default=ACK_TIMEOUT, help="seconds to wait for a reply")
    parser.add_argument("--tries", type=int, default=MAX_TRIES, help="attempts per request")
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
        except ValueError as exc:
            print(f"\nERROR - BAD PAYLOAD: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
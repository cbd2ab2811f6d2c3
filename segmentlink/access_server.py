"""UDP server that answers access permission requests from its database."""

from __future__ import annotations

import argparse
import dataclasses
import socket
import sys
from collections.abc import Sequence
from typing import TextIO

from segmentlink.packets import PORT, ProtocolError
from segmentlink.permission import (
    PERMISSION_PACKET_SIZE,
    Permission,
    PermissionPacket,
    decode_permission_packet,
    format_permission_packet,
)
from segmentlink.subscribers import (
    DATABASE_FILE,
    STATUS_NOT_PAID,
    STATUS_PAID,
    Subscriber,
    load_subscribers,
    verify_user,
)

_VERDICTS = {
    STATUS_NOT_PAID: Permission.NOT_PAID,
    STATUS_PAID: Permission.ACCESS_OK,
}


def respond(packet: PermissionPacket, subscribers: Sequence[Subscriber]) -> PermissionPacket | None:
    """Return the verdict for an access request, or None if it is not one."""
    if packet.permission != Permission.ACCESS_PERM:
        return None
    status = verify_user(subscribers, packet.subscriber_number, packet.technology)
    verdict = _VERDICTS.get(status, Permission.NOT_EXIST)
    return dataclasses.replace(packet, permission=verdict)


def run_server(sock, subscribers: Sequence[Subscriber], out: TextIO | None = None) -> None:
    """Receive requests on ``sock`` forever, replying to each sender."""
    if out is None:
        out = sys.stdout
    while True:
        data, address = sock.recvfrom(PERMISSION_PACKET_SIZE)
        try:
            packet = decode_permission_packet(data)
        except ProtocolError as exc:
            print(f"ERROR - MALFORMED PACKET: {exc}", file=out)
            continue
        print(f"\n\n{format_permission_packet(packet)}", file=out)
        reply = respond(packet, subscribers)
        if reply is not None:
            sock.sendto(reply.to_bytes(), address)
        print("\n", file=out)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Answer subscriber access requests over UDP.")
    parser.add_argument("--host", default="0.0.0.0", help="address to bind")
    parser.add_argument("--port", type=int, default=PORT, help="UDP port to listen on")
    parser.add_argument("--database", default=DATABASE_FILE, help="subscriber database file")
    args = parser.parse_args(argv)

    try:
        subscribers = load_subscribers(args.database)
    except OSError:
        print("\nERROR - THE FILE DOESN'T EXIST. PLEASE CHECK THE FOLDER.", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"\nERROR - BAD DATABASE: {exc}", file=sys.stderr)
        return 1

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as exc:
        print(f"\nERROR - A SOCKET COULDN'T BE CREATED: {exc}", file=sys.stderr)
        return 1
    with sock:
        sock.bind((args.host, args.port))
        try:
            run_server(sock, subscribers)
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
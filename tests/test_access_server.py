import dataclasses
import io

import pytest

from segmentlink.access_server import main, respond, run_server
from segmentlink.permission import Permission, PermissionPacket, decode_permission_packet
from segmentlink.subscribers import Subscriber

SUBSCRIBERS = [Subscriber(1001, 4, 1), Subscriber(1002, 3, 0), Subscriber(1003, 5, 7)]
SENDER = ("127.0.0.1", 40000)


class _Stop(Exception):
    pass


class FakeSocket:
    def __init__(self, datagrams):
        self.incoming = list(datagrams)
        self.sent = []

    def recvfrom(self, size):
        if not self.incoming:
            raise _Stop
        return self.incoming.pop(0), SENDER

    def sendto(self, data, address):
        self.sent.append((data, address))


def _request(number, technology, seg_no=1):
    return PermissionPacket(seg_no=seg_no, subscriber_number=number, technology=technology, plen=6)


def test_paid_subscriber_is_granted():
    request = _request(1001, 4)
    reply = respond(request, SUBSCRIBERS)
    assert reply == dataclasses.replace(request, permission=Permission.ACCESS_OK)


def test_unpaid_subscriber():
    assert respond(_request(1002, 3), SUBSCRIBERS).permission is Permission.NOT_PAID


@pytest.mark.parametrize("number, technology", [(9999, 4), (1002, 4), (1003, 5)])
def test_unknown_subscriber(number, technology):
    assert respond(_request(number, technology), SUBSCRIBERS).permission is Permission.NOT_EXIST


def test_non_request_gets_no_reply():
    packet = dataclasses.replace(_request(1001, 4), permission=Permission.ACCESS_OK)
    assert respond(packet, SUBSCRIBERS) is None


def test_run_server_replies_to_sender():
    datagrams = [
        _request(1001, 4, 1).to_bytes(),
        b"garbage",
        _request(1002, 3, 2).to_bytes(),
        dataclasses.replace(_request(1001, 4, 3), permission=Permission.NOT_PAID).to_bytes(),
    ]
    sock = FakeSocket(datagrams)
    out = io.StringIO()
    with pytest.raises(_Stop):
        run_server(sock, SUBSCRIBERS, out)
    replies = [decode_permission_packet(data) for data, _ in sock.sent]
    assert [r.permission for r in replies] == [Permission.ACCESS_OK, Permission.NOT_PAID]
    assert [r.seg_no for r in replies] == [1, 2]
    assert all(address == SENDER for _, address in sock.sent)
    assert "Subscriber Number: 1001" in out.getvalue()
    assert "ERROR - MALFORMED PACKET" in out.getvalue()


def test_main_missing_database(tmp_path):
    assert main(["--database", str(tmp_path / "missing.txt")]) == 1
# segmentlink

`segmentlink` implements two small request/response protocols over UDP,
each with a server and a client. Both use port 8081 by default.

## Data segments with acknowledgements

A client sends numbered data packets, each carrying one line of text. The
server checks every packet and replies with either an ACK or a REJECT packet.
REJECT packets carry a sub-code (`RejectCode`) that says what went wrong.
The checks are made in this order:

1. `DUPLICATE_PACKET` – the segment number has been seen before
2. `OUT_OF_SEQUENCE` – not the segment number the server expects next
3. `LENGTH_MISMATCH` – the declared payload length differs from the payload
4. `END_OF_PACKET_MISSING` – the end-of-packet identifier is not `0xFFFF`

The number the server expects next advances by one with every packet it
receives, whether that packet is accepted or rejected. Packets of the wrong
size are reported as malformed and get no reply.

The client sends ten packets, taking the payloads from a file, one line per
packet (lines longer than 254 bytes are split over several packets; once the
file runs out, the last payload is sent again). Packets 7 to 10 are
deliberately faulty so that every reject sub-code can be seen: packet 7 is
out of sequence, packet 8 declares a length 6 bytes too long, packet 9 lacks
its end identifier and packet 10 repeats segment number 1.

For each packet the client waits for a reply and sends the packet again if
none arrives. When every attempt goes unanswered it stops with
`ERROR - SERVER NOT RESPONDING.` and exit status 1.

Start the server, then the client in another terminal:

    segmentlink-server
    segmentlink-client

Options:

- `segmentlink-server [--host ADDR] [--port N]` – bind address (default
  `0.0.0.0`) and port (default 8081).
- `segmentlink-client [--host ADDR] [--port N] [--payload FILE] [--timeout SECONDS] [--tries N]`
  – server address (default `127.0.0.1`), port, payload file (default
  `payload.txt`), seconds to wait for each reply (default 3) and attempts per
  packet (default 3).

Both print each packet they handle and what the other side answered.

## Subscriber access permission

A client asks whether a subscriber may use a given network technology
(2G, 3G, 4G or 5G). The server looks the subscriber up in its database and
answers with one of the `Permission` values:

- `ACCESS_OK` – the subscriber has status 1 (paid)
- `NOT_PAID` – the subscriber has status 0
- `NOT_EXIST` – no entry matches, or the entry has any other status

A subscriber is found only when both the number and the technology match.
Packets that are not access requests get no reply.

Each line of the database holds a subscriber number, a technology and a
status, separated by whitespace. Blank lines are skipped; a line with fewer
than three fields, a field that is not an integer, or more than ten entries
is an error:

    1000 4 1
    1001 3 0
    1002 5 1

The client sends five requests, taken from a file in which each line holds a
subscriber number and a technology. Once the file runs out, the last request
is sent again; an empty file is an error.

    1000 4
    1001 3
    1003 2

Start them with:

    segmentlink-access-server
    segmentlink-access-client

Options:

- `segmentlink-access-server [--host ADDR] [--port N] [--database FILE]` –
  the database defaults to `Verification_Database.txt`.
- `segmentlink-access-client [--host ADDR] [--port N] [--payload FILE] [--timeout SECONDS] [--tries N]`
  – same meaning and defaults as for `segmentlink-client`.

## Using the library

The packet formats and the checking logic can be used without sockets:

- `segmentlink.packets` – `DataPacket`, `AckPacket` and `RejectPacket` with
  their `to_bytes()` encodings, `decode_data_packet()`, `decode_response()`,
  `format_data_packet()`, and the `PacketType` and `RejectCode`
  enumerations. Bad input raises `ProtocolError` (a `ValueError`).
- `segmentlink.server.SequenceValidator` – keeps track of received segments;
  `check(packet)` returns the ACK or REJECT reply for one data packet.
  `run_server(sock)` serves on an already bound socket.
- `segmentlink.client` – `build_packets(lines)` builds the ten packets,
  `send_with_retries()` and `run_client()` do the exchange and raise
  `ServerNotResponding` when no reply comes.
- `segmentlink.permission` – `PermissionPacket`, `Permission`, `Technology`,
  `decode_permission_packet()` and `format_permission_packet()`.
- `segmentlink.subscribers` – `Subscriber`, `parse_subscribers()`,
  `load_subscribers()` and `verify_user()`, which returns the matching
  subscriber's status or -1.
- `segmentlink.access_server.respond()` builds the reply to one request;
  `segmentlink.access_client.parse_request()` builds a request from a line.

## Limitations

- A data-segment server keeps a single sequence for all senders and never
  resets it; restart the server before running the client again.
- Both servers run until interrupted and keep nothing between runs; the
  subscriber database is read once at start-up and never written.

## Running the tests

    pip install -e .[test]
    pytest
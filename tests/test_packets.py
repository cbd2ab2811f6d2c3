import pytest

from segmentlink.packets import (
    ACK_PACKET_SIZE,
    DATA_PACKET_SIZE,
    END_PACKET_ID,
    REJECT_PACKET_SIZE,
    START_PACKET_ID,
    AckPacket,
    DataPacket,
    PacketType,
    ProtocolError,
    RejectCode,
    RejectPacket,
    decode_data_packet,
    decode_response,
    format_data_packet,
)


def test_wire_sizes_match_padded_layout():
    data_raw = DataPacket(seg_no=1, payload=b"a").to_bytes()
    ack_raw = AckPacket(seg_no=1).to_bytes()
    reject_raw = RejectPacket(sub_code=RejectCode.OUT_OF_SEQUENCE, seg_no=1).to_bytes()
    assert len(data_raw) == DATA_PACKET_SIZE == 266
    assert len(ack_raw) == ACK_PACKET_SIZE == 10
    assert len(reject_raw) == REJECT_PACKET_SIZE == 12


def test_packet_type_values():
    data = decode_data_packet(DataPacket(seg_no=1, payload=b"a").to_bytes())
    assert data.packet_type == 0xFF1
    ack = decode_response(AckPacket(seg_no=2).to_bytes())
    assert ack.packet_type == 0xFFF2
    reject = decode_response(
        RejectPacket(sub_code=RejectCode.DUPLICATE_PACKET, seg_no=10).to_bytes()
    )
    assert reject.sub_code == 0xFFF7


def test_data_packet_defaults_plen_from_payload():
    packet = DataPacket(seg_no=3, payload=b"hello world")
    assert packet.plen == len(b"hello world")
    assert packet.start_id == START_PACKET_ID
    assert packet.end_id == END_PACKET_ID
    assert packet.packet_type is PacketType.DATA


def test_data_packet_wire_starts_with_identifier():
    raw = DataPacket(seg_no=1, payload=b"abc").to_bytes()
    assert len(raw) == DATA_PACKET_SIZE
    assert raw[:2] == b"\xff\xff"
    assert raw[-2:] == b"\xff\xff"


def test_data_packet_round_trip():
    packet = DataPacket(seg_no=7, payload=b"line of text\n", plen=19, end_id=0)
    decoded = decode_data_packet(packet.to_bytes())
    assert decoded == packet


def test_data_packet_max_payload_round_trip():
    packet = DataPacket(seg_no=2, payload=b"x" * 255)
    assert decode_data_packet(packet.to_bytes()).payload == b"x" * 255


def test_data_packet_payload_too_long():
    with pytest.raises(ProtocolError):
        DataPacket(seg_no=1, payload=b"y" * 256).to_bytes()


def test_data_packet_field_out_of_range():
    with pytest.raises(ProtocolError):
        DataPacket(seg_no=300, payload=b"a").to_bytes()


def test_data_packet_rejects_nul_in_payload():
    with pytest.raises(ProtocolError):
        DataPacket(seg_no=1, payload=b"a\0b").to_bytes()


def test_decode_data_packet_wrong_size():
    with pytest.raises(ProtocolError):
        decode_data_packet(b"\xff\xff\xff")


def test_ack_round_trip():
    ack = AckPacket(seg_no=4)
    decoded = decode_response(ack.to_bytes())
    assert decoded == ack
    assert decoded.packet_type == PacketType.ACK


def test_ack_decoded_from_larger_buffer():
    raw = AckPacket(seg_no=5).to_bytes() + b"\0\0"
    assert decode_response(raw) == AckPacket(seg_no=5)


def test_reject_round_trip():
    reject = RejectPacket(sub_code=RejectCode.LENGTH_MISMATCH, seg_no=8, end_id=0)
    decoded = decode_response(reject.to_bytes())
    assert decoded == reject
    assert decoded.sub_code is RejectCode.LENGTH_MISMATCH


def test_truncated_reject_raises():
    raw = RejectPacket(sub_code=RejectCode.OUT_OF_SEQUENCE, seg_no=1).to_bytes()
    with pytest.raises(ProtocolError):
        decode_response(raw[:ACK_PACKET_SIZE])


def test_unknown_response_type_raises():
    raw = DataPacket(seg_no=1, payload=b"a").to_bytes()[:REJECT_PACKET_SIZE]
    with pytest.raises(ProtocolError):
        decode_response(raw)


def test_too_short_response_raises():
    with pytest.raises(ProtocolError):
        decode_response(b"\xff\xff")


def test_format_data_packet():
    text = format_data_packet(DataPacket(seg_no=9, payload=b"hi", end_id=0))
    lines = text.splitlines()
    assert lines[0] == "Start Packet ID -  ffff"
    assert lines[2] == "Packet Type -  ff1"
    assert "Segment # -  9" in lines
    assert "Payload -  hi" in lines
    assert lines[-1] == "End Packet ID -  0"
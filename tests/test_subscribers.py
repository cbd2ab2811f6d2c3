import pytest

from segmentlink.subscribers import (
    MAX_SUBSCRIBERS,
    STATUS_NOT_PAID,
    STATUS_PAID,
    STATUS_UNKNOWN,
    Subscriber,
    load_subscribers,
    parse_subscribers,
    verify_user,
)

LINES = ["1001 4 1\n", "1002 3 0\n", "1003 5 1\n"]


def test_parse_lines():
    assert parse_subscribers(LINES) == [
        Subscriber(1001, 4, 1),
        Subscriber(1002, 3, 0),
        Subscriber(1003, 5, 1),
    ]


def test_parse_bytes_and_blank_lines():
    assert parse_subscribers([b"1001 4 1\n", b"\n", b"1002 3 0"]) == [
        Subscriber(1001, 4, 1),
        Subscriber(1002, 3, 0),
    ]


@pytest.mark.parametrize("line", ["1001 4\n", "abc 4 1\n", "1001 x 1\n"])
def test_malformed_line_raises(line):
    with pytest.raises(ValueError):
        parse_subscribers([line])


def test_too_many_subscribers_raises():
    lines = [f"{1000 + n} 4 1\n" for n in range(MAX_SUBSCRIBERS + 1)]
    with pytest.raises(ValueError):
        parse_subscribers(lines)


def test_full_database_is_accepted():
    lines = [f"{1000 + n} 4 1\n" for n in range(MAX_SUBSCRIBERS)]
    assert len(parse_subscribers(lines)) == MAX_SUBSCRIBERS


def test_load_from_file(tmp_path):
    path = tmp_path / "db.txt"
    path.write_text("".join(LINES), encoding="utf-8")
    assert load_subscribers(path) == parse_subscribers(LINES)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_subscribers(tmp_path / "missing.txt")


def test_verify_user():
    subscribers = parse_subscribers(LINES)
    assert verify_user(subscribers, 1001, 4) == STATUS_PAID
    assert verify_user(subscribers, 1002, 3) == STATUS_NOT_PAID
    assert verify_user(subscribers, 1002, 4) == STATUS_UNKNOWN
    assert verify_user(subscribers, 9999, 4) == STATUS_UNKNOWN
    assert verify_user([], 1001, 4) == STATUS_UNKNOWN
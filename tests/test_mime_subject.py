"""Tests for MIME Subject encoding."""

from email.header import decode_header, make_header

from mini_mailer.tools import encode_subject


def decode(encoded):
    return str(make_header(decode_header(encoded)))


def test_empty():
    assert encode_subject("") == ""


def test_ascii_unchanged():
    assert encode_subject("Hello world") == "Hello world"


def test_non_ascii_is_b_encoded():
    encoded = encode_subject("Grüße")
    assert encoded.startswith("=?UTF-8?b?")
    assert encoded.endswith("?=")
    assert decode(encoded) == "Grüße"


def test_long_subject_one_word_per_line():
    subject = " ".join(["Ünïcödé"] * 20)
    encoded = encode_subject(subject)
    lines = encoded.split("\n")

    assert len(lines) > 1
    assert not encoded.endswith("\n")
    for line in lines[1:]:
        assert line.startswith(" =?")
    for line in lines:
        assert line.strip().lower().startswith("=?utf-8?b?")
        assert line.endswith("?=")
    assert decode(encoded) == subject


def test_split_ignores_header_name():
    # 22 two-byte characters fill 44 of the 45 bytes a word can carry
    encoded = encode_subject("é" * 30)
    assert encoded == (
        "=?UTF-8?b?" + "w6nDqcOp" * 7 + "w6k=?=\n"
        " =?UTF-8?b?w6nDqcOpw6nDqcOpw6nDqQ==?="
    )


def test_split_never_breaks_a_character():
    encoded = encode_subject("€" * 16)
    assert encoded == "=?UTF-8?b?" + "4oKs" * 15 + "?=\n =?UTF-8?b?4oKs?="
    assert max(len(line.strip()) for line in encoded.split("\n")) <= 75

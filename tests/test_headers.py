"""Tests for the header model."""

from mini_mailer.core import HeaderSet, extract_address, is_valid_address, parse_headers
from mini_mailer.core.headers import split_message


class TestParseHeaders:
    def test_keeps_written_order(self):
        headers = parse_headers("From: a@x.com\r\nTo: b@y.com\r\nSubject: hi\r\n\r\nbody")
        assert headers.names() == ["From", "To", "Subject"]

    def test_lookup_is_case_insensitive(self):
        headers = parse_headers("SUBJECT: Hello\r\n\r\n")
        assert headers["subject"] == "Hello"
        assert headers.get("Subject") == "Hello"
        assert "sUbJeCt" in headers

    def test_values_and_names_are_trimmed(self):
        headers = parse_headers("  To :   b@y.com  \r\n\r\n")
        assert headers.get("to") == "b@y.com"

    def test_splits_on_first_colon_space_only(self):
        headers = parse_headers("Subject: Re: hello: world\r\n\r\n")
        assert headers["subject"] == "Re: hello: world"

    def test_lines_without_colon_space_are_dropped(self):
        headers = parse_headers("From: a@x.com\r\ngarbage\r\nX-Tight:value\r\n\r\n")
        assert headers.names() == ["From"]

    def test_body_is_not_parsed(self):
        headers = parse_headers("From: a@x.com\r\n\r\nTo: not-a-header@y.com")
        assert "to" not in headers

    def test_no_separator_treats_all_as_headers(self):
        headers = parse_headers("From: a@x.com\r\nTo: b@y.com")
        assert headers.names() == ["From", "To"]

    def test_duplicate_names_keep_last_value(self):
        headers = parse_headers("To: first@y.com\r\nTo: second@y.com\r\n\r\n")
        assert headers["to"] == "second@y.com"
        assert headers.items() == [("To", "first@y.com"), ("To", "second@y.com")]
        assert len(headers) == 1


class TestHeaderSet:
    def test_add_updates_index(self):
        headers = HeaderSet()
        headers.add("Message-ID", "<1@x.y>")
        assert headers.get("message-id") == "<1@x.y>"
        assert list(headers) == ["message-id"]

    def test_get_default(self):
        assert HeaderSet().get("date", "missing") == "missing"

    def test_contains_ignores_non_strings(self):
        assert 42 not in HeaderSet([("From", "a@x.com")])


class TestSplitMessage:
    def test_split(self):
        assert split_message("A: b\r\n\r\nbody\r\n\r\nmore") == ("A: b", "body\r\n\r\nmore")

    def test_no_separator(self):
        assert split_message("A: b\r\n") == ("A: b\r\n", None)


class TestExtractAddress:
    def test_angle_brackets_are_kept(self):
        headers = parse_headers("From: Name <a@b.com>\r\n\r\n")
        assert extract_address(headers, "from") == "<a@b.com>"

    def test_bare_address(self):
        headers = parse_headers("From: a@b.com\r\n\r\n")
        assert extract_address(headers, "from") == "a@b.com"

    def test_uses_last_brackets(self):
        headers = parse_headers("To: <x@y.com> Name <a@b.com>\r\n\r\n")
        assert extract_address(headers, "TO") == "<a@b.com>"

    def test_missing_header(self):
        assert extract_address(HeaderSet(), "from") == ""


class TestIsValidAddress:
    def test_valid(self):
        assert is_valid_address("a@b.com")

    def test_missing_at(self):
        assert not is_valid_address("abc")

    def test_missing_dot(self):
        assert not is_valid_address("a@b")

    def test_empty(self):
        assert not is_valid_address("")

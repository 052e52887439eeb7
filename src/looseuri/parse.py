"""looseuri.parse
A lenient URI splitter.
Finds the seven generic URI components without validating them against RFC 3986.
"""

import dataclasses
import re

from typing import NamedTuple, Self

from urllib.parse import scheme_chars, unquote_to_bytes

# DIGIT = %x30-39
_DIGIT: str = r"[0-9]"

# HEXDIG = DIGIT / "A" / "B" / "C" / "D" / "E" / "F"
_HEXDIG: str = rf"(?:{_DIGIT}|[A-Fa-f])"

# pct-encoded = "%" HEXDIG HEXDIG
_PCT_ENCODED: str = rf"%(?P<octet>{_HEXDIG}{{2}})"
_PCT_ENCODED_PAT: re.Pattern[str] = re.compile(_PCT_ENCODED)

# A "%" that does not start a pct-encoded triplet.
_BAD_PCT_PAT: re.Pattern[str] = re.compile(rf"%(?!{_HEXDIG}{{2}})")

# port = *DIGIT
_PORT_PAT: re.Pattern[str] = re.compile(rf"{_DIGIT}*")


class InvalidUri(ValueError):
    """Raised when a string fails to validate as a URI."""

    def __init__(self: Self, message: str = "URI failed to validate") -> None:
        super().__init__(message)


class Span(NamedTuple):
    """source[start:stop], without making the copy until it is asked for."""

    source: str
    start: int
    stop: int

    def __str__(self: Self) -> str:
        return self.source[self.start : self.stop]

    @classmethod
    def whole(cls: type[Self], source: str) -> Self:
        return cls(source, 0, len(source))


def _text(span: Span | None) -> str | None:
    if span is None:
        return None
    return str(span)


@dataclasses.dataclass(frozen=True, eq=False)
class UriView:
    """Components of a URI as spans into the string(s) they were found in.
    Use parse_uri or UriOwned.as_view rather than building one by hand.

    A view does not copy its source. It is only meaningful while the caller
    still treats that source as the URI it describes; keep a UriOwned instead
    when the URI has to outlive it.

    Equality and hashing go by field text, so two views of equal URIs parsed
    from different strings compare equal.
    """

    raw_scheme: Span | None = None
    raw_userinfo: Span | None = None
    raw_host: Span | None = None
    raw_port: Span | None = None
    raw_path: Span | None = None
    raw_query: Span | None = None
    raw_fragment: Span | None = None

    @classmethod
    def parse(cls: type[Self], data: str) -> Self:
        return parse_uri(data)

    @property
    def scheme(self: Self) -> str | None:
        return _text(self.raw_scheme)

    @property
    def userinfo(self: Self) -> str | None:
        return _text(self.raw_userinfo)

    @property
    def host(self: Self) -> str | None:
        return _text(self.raw_host)

    @property
    def port(self: Self) -> str | None:
        return _text(self.raw_port)

    @property
    def path(self: Self) -> str | None:
        return _text(self.raw_path)

    @property
    def query(self: Self) -> str | None:
        return _text(self.raw_query)

    @property
    def fragment(self: Self) -> str | None:
        return _text(self.raw_fragment)

    @property
    def port_number(self: Self) -> int | None:
        port: str | None = self.port
        if port is not None and len(port) > 0:
            return int(port, base=10)
        return None

    @property
    def authority(self: Self) -> str | None:
        """userinfo@host:port"""
        host: str | None = self.host
        if host is None:
            return None
        result: str = ""
        if self.raw_userinfo is not None:
            result += f"{self.userinfo}@"
        result += host
        if self.raw_port is not None:
            result += f":{self.port}"
        return result

    def _values(self: Self) -> tuple[str | None, ...]:
        return (self.scheme, self.userinfo, self.host, self.port, self.path, self.query, self.fragment)

    def __eq__(self: Self, other: object) -> bool:
        if not isinstance(other, UriView):
            return NotImplemented
        return self._values() == other._values()

    def __hash__(self: Self) -> int:
        return hash(self._values())

    def serialize(self: Self) -> str:
        """Renders the components in their one canonical order.
        Presence, not emptiness, decides whether a component and its delimiter are written.
        An authority-form path always gets exactly one separating "/", however many it started with.
        """
        result: str = ""
        if self.raw_scheme is not None:
            result += f"{self.scheme}:"
        if self.raw_host is not None:
            result += f"//{self.authority}"
            if self.raw_path is not None:
                result += "/" + self.path.lstrip("/")
        elif self.raw_path is not None:
            # Opaque data such as mailto: and urn: bodies
            result += self.path
        if self.raw_query is not None:
            result += f"?{self.query}"
        if self.raw_fragment is not None:
            result += f"#{self.fragment}"
        return result

    def __str__(self: Self) -> str:
        return self.serialize()

    def to_owned(self: Self) -> "UriOwned":
        return UriOwned.from_view(self)


@dataclasses.dataclass(frozen=True)
class UriOwned:
    """A URI whose components are held as independent strings."""

    scheme: str | None = None
    userinfo: str | None = None
    host: str | None = None
    port: str | None = None
    path: str | None = None
    query: str | None = None
    fragment: str | None = None

    @classmethod
    def from_view(cls: type[Self], view: UriView) -> Self:
        return cls(
            scheme=view.scheme,
            userinfo=view.userinfo,
            host=view.host,
            port=view.port,
            path=view.path,
            query=view.query,
            fragment=view.fragment,
        )

    def as_view(self: Self) -> UriView:
        """Each span covers one of this object's strings whole; nothing is copied."""

        def borrow(field: str | None) -> Span | None:
            return None if field is None else Span.whole(field)

        return UriView(
            raw_scheme=borrow(self.scheme),
            raw_userinfo=borrow(self.userinfo),
            raw_host=borrow(self.host),
            raw_port=borrow(self.port),
            raw_path=borrow(self.path),
            raw_query=borrow(self.query),
            raw_fragment=borrow(self.fragment),
        )

    @property
    def port_number(self: Self) -> int | None:
        return self.as_view().port_number

    @property
    def authority(self: Self) -> str | None:
        return self.as_view().authority

    def serialize(self: Self) -> str:
        return self.as_view().serialize()

    def __str__(self: Self) -> str:
        return self.serialize()


def _is_scheme_char(c: str) -> bool:
    # scheme_chars is ASCII-only; letters are accepted from all of Unicode.
    return c.isalpha() or c in scheme_chars


def parse_uri(data: str) -> UriView:
    """Lenient URI parser.
    Splits off, in order, the fragment, the query, the scheme and then the authority, and never backtracks.
    Anything that doesn't fit a component is left in the path, so e.g. "a b:c" parses as a path.
    Raises InvalidUri if data fails to validate, although no string currently does.

    Known limitation: the port is whatever follows the rightmost ":" of the authority, provided it is all digits.
    IPv6 literals get no special treatment, so "[::1]" only survives because "1]" isn't a number.
    """
    if not isinstance(data, str):
        raise TypeError(f"expected str, got {type(data).__name__}")

    scheme: Span | None = None
    userinfo: Span | None = None
    host: Span | None = None
    port: Span | None = None
    path: Span | None = None
    query: Span | None = None
    fragment: Span | None = None

    start: int = 0
    end: int = len(data)
    pos: int

    pos = data.find("#", start, end)
    if pos != -1:
        fragment = Span(data, pos + 1, end)
        end = pos

    pos = data.find("?", start, end)
    if pos != -1:
        query = Span(data, pos + 1, end)
        end = pos

    # Only a leading letter can start a scheme, so "1http://x" and "::" stay paths.
    if start < end and data[start].isalpha():
        pos = data.find(":", start, end)
        if pos != -1 and all(_is_scheme_char(c) for c in data[start:pos]):
            scheme = Span(data, start, pos)
            start = pos + 1

    if data.startswith("//", start, end):
        start += 2

        pos = data.find("/", start, end)
        if pos != -1:
            path = Span(data, pos + 1, end)
            end = pos

        pos = data.rfind(":", start, end)
        if pos != -1 and _PORT_PAT.fullmatch(data, pos + 1, end) is not None:
            port = Span(data, pos + 1, end)
            end = pos

        pos = data.find("@", start, end)
        if pos != -1:
            userinfo = Span(data, start, pos)
            start = pos + 1
        host = Span(data, start, end)
    else:
        path = Span(data, start, end)

    return UriView(
        raw_scheme=scheme,
        raw_userinfo=userinfo,
        raw_host=host,
        raw_port=port,
        raw_path=path,
        raw_query=query,
        raw_fragment=fragment,
    )


def try_from_string(data: str) -> UriView:
    """Same as parse_uri."""
    return parse_uri(data)


def to_string(uri: UriView | UriOwned) -> str:
    return uri.serialize()


def percent_decode(data: str) -> str | None:
    """Replaces each %XX escape with the character whose code point is XX.
    Returns None if any "%" isn't followed by two hex digits; the result is never partially decoded.

    Escaped octets are not reassembled into UTF-8 sequences: "%C3%A9" decodes to "Ã©", not "é".
    Use percent_decode_bytes and decode the result yourself when that matters.
    """
    if not isinstance(data, str):
        raise TypeError(f"expected str, got {type(data).__name__}")
    if _BAD_PCT_PAT.search(data) is not None:
        return None
    return _PCT_ENCODED_PAT.sub(lambda m: chr(int(m["octet"], 16)), data)


def percent_decode_bytes(data: str) -> bytes | None:
    """Like percent_decode, but returns the octets.
    Unescaped characters come out UTF-8 encoded.
    """
    if not isinstance(data, str):
        raise TypeError(f"expected str, got {type(data).__name__}")
    if _BAD_PCT_PAT.search(data) is not None:
        return None
    # Every "%" is now known to start a valid escape, so the lenient stdlib decoder is exact.
    return unquote_to_bytes(data)

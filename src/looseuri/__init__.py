__version__ = "0.1"

from .parse import InvalidUri, Span, UriOwned, UriView, parse_uri, percent_decode, percent_decode_bytes, scheme_chars, to_string, try_from_string

"""Domain model exports."""

from .access_token import AccessTokenRecord, format_timestamp, parse_timestamp

__all__ = ["AccessTokenRecord", "format_timestamp", "parse_timestamp"]

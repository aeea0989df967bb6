"""Built-in string format checkers.

Formats are registered on a ``jsonschema.FormatChecker``. Each checker raises
ValueError with a short reason on failure; the reason is surfaced in the
validation error message. Unknown format names are never checked.
"""

import re
from collections.abc import Callable, Mapping
from datetime import date, time
from urllib.parse import urlsplit

from email_validator import EmailNotValidError
from email_validator.syntax import split_email, validate_email_local_part
from jsonschema import FormatChecker

FormatFunc = Callable[[object], bool]

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_DATE_TIME_RE = re.compile(
    r"(?P<date>[0-9]{4}-[0-9]{2}-[0-9]{2})[Tt]"
    r"(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})"
    r"(?:\.[0-9]+)?"
    r"(?P<offset>[Zz]|[+-](?P<off_hour>[0-9]{2}):(?P<off_minute>[0-9]{2}))"
)
_UUID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")
_PORT_RE = re.compile(r"[0-9]+(?:[/?#].*)?")
_HOSTNAME_RE = re.compile(
    r"(?!-)[A-Za-z0-9-]{1,63}(?<!-)(?:\.(?!-)[A-Za-z0-9-]{1,63}(?<!-))*"
)

FORMAT_EXAMPLES = {
    "date": "example: 2025-08-03",
    "date-time": "example: 2025-08-03T10:30:00Z",
    "email": "example: user@example.com",
    "uuid": "example: 123e4567-e89b-12d3-a456-426614174000",
    "uri": "example: https://example.com/path",
}


def format_example(fmt: str) -> str:
    """Return the suggestion shown when a value fails ``fmt``."""
    return FORMAT_EXAMPLES.get(fmt, "check format requirements")


def is_date(instance: object) -> bool:
    """Strict calendar date, YYYY-MM-DD."""
    if not isinstance(instance, str) or not _DATE_RE.fullmatch(instance):
        raise ValueError("expected YYYY-MM-DD")
    try:
        date.fromisoformat(instance)
    except ValueError as exc:
        raise ValueError(f"not a calendar date ({exc})") from exc
    return True


def is_date_time(instance: object) -> bool:
    """RFC 3339 timestamp; the time-zone designator is mandatory."""
    match = _DATE_TIME_RE.fullmatch(instance) if isinstance(instance, str) else None
    if match is None:
        raise ValueError("expected RFC 3339 timestamp with time zone, e.g. 2025-08-03T10:30:00Z")
    try:
        date.fromisoformat(match["date"])
        time(int(match["hour"]), int(match["minute"]), int(match["second"]))
    except ValueError as exc:
        raise ValueError(f"timestamp out of range ({exc})") from exc
    if match["off_hour"] is not None:
        if int(match["off_hour"]) > 23 or int(match["off_minute"]) > 59:
            raise ValueError("time zone offset out of range")
    return True


def is_email(instance: object) -> bool:
    """``local@domain`` or ``Display Name <local@domain>``.

    The domain only has to be a syntactically valid host name; single-label
    and reserved names such as ``localhost`` or ``example.test`` are accepted.
    """
    if not isinstance(instance, str):
        raise ValueError("expected string value")
    try:
        _, local_part, domain, quoted = split_email(instance)
        validate_email_local_part(local_part, quoted_local_part=quoted)
    except EmailNotValidError as exc:
        raise ValueError("expected local@domain or Name <local@domain>") from exc
    if len(domain) > 253 or not _HOSTNAME_RE.fullmatch(domain):
        raise ValueError("expected local@domain or Name <local@domain>")
    return True


def is_uuid(instance: object) -> bool:
    """Hyphenated 8-4-4-4-12 hexadecimal UUID."""
    if not isinstance(instance, str) or not _UUID_RE.fullmatch(instance):
        raise ValueError("expected hyphenated 8-4-4-4-12 hexadecimal UUID")
    return True


def is_uri(instance: object) -> bool:
    """Absolute URI with a scheme.

    ``host:port`` strings such as ``localhost:3000`` have no scheme and are
    rejected.
    """
    if not isinstance(instance, str) or any(ch.isspace() for ch in instance):
        raise ValueError("URI must not contain whitespace")
    parts = urlsplit(instance)
    if not parts.scheme or not _SCHEME_RE.fullmatch(parts.scheme):
        raise ValueError("missing scheme")
    if not (parts.netloc or parts.path):
        raise ValueError("missing content after scheme")
    if not instance[len(parts.scheme) + 1 :].startswith("//"):
        if "." in parts.scheme or _PORT_RE.fullmatch(instance[len(parts.scheme) + 1 :]):
            raise ValueError("missing scheme, got host:port")
    return True


BUILTIN_FORMATS: Mapping[str, FormatFunc] = {
    "date": is_date,
    "date-time": is_date_time,
    "email": is_email,
    "uuid": is_uuid,
    "uri": is_uri,
}


def build_format_checker(extra: Mapping[str, FormatFunc] | None = None) -> FormatChecker:
    """Build a format checker holding the built-in formats.

    Args:
        extra: Additional format name -> checker function. A checker signals
            failure by returning False or raising ValueError. Entries override
            built-ins with the same name.

    Returns:
        A new FormatChecker; it is not mutated after this call.
    """
    checker = FormatChecker(formats=())
    for name, func in {**BUILTIN_FORMATS, **(extra or {})}.items():
        checker.checks(name, raises=ValueError)(func)
    return checker

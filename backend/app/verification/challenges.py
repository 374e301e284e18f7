"""
Proof checkers for the two challenge methods.

Each checker has the same shape, ``check(domain, token) -> bool``, and
never raises for lookup problems: NXDOMAIN, timeouts, TLS errors,
non-2xx responses and slow or oversized bodies all mean "proof not found".
"""

from __future__ import annotations

import logging
from functools import partial
from time import monotonic
from typing import Callable, Iterable, Union

import dns.exception
import dns.resolver
import requests

from app.core.verification import (
    DNS_CHALLENGE_SUBDOMAIN,
    FILE_CHALLENGE_PATH,
    dns_record_name,
    file_challenge_url,
)
from app.models.enums import VerificationMethodEnum


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_USER_AGENT = "DomainVerify/1.0"
DEFAULT_MAX_BODY_BYTES = 4096

TxtPiece = Union[bytes, str]
TxtResolver = Callable[[str], Iterable[Union[TxtPiece, Iterable[TxtPiece]]]]
ChallengeCheck = Callable[[str, str], bool]


def resolve_txt(name: str, *, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> list[list[bytes]]:
    """Return every TXT record at ``name`` as its list of character-strings."""
    resolver = dns.resolver.Resolver()
    resolver.timeout = timeout
    resolver.lifetime = timeout
    answers = resolver.resolve(name, "TXT")
    return [list(rdata.strings) for rdata in answers]


def _as_bytes(piece: TxtPiece) -> bytes:
    if isinstance(piece, bytes):
        return piece
    return str(piece).encode("utf-8")


def _join_txt_record(record) -> bytes:
    # A single TXT record may be split into several 255-byte strings.
    if isinstance(record, (bytes, str)):
        return _as_bytes(record)
    return b"".join(_as_bytes(piece) for piece in record)


def check_dns(
    domain: str,
    token: str,
    *,
    resolver: TxtResolver | None = None,
    subdomain: str = DNS_CHALLENGE_SUBDOMAIN,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> bool:
    name = dns_record_name(domain, subdomain)
    expected = token.encode("utf-8")
    try:
        if resolver is None:
            records = resolve_txt(name, timeout=timeout)
        else:
            records = resolver(name)
        return any(_join_txt_record(record) == expected for record in records)
    except (dns.exception.DNSException, OSError, UnicodeError) as exc:
        logger.info(
            "challenge.dns.lookup_failed",
            extra={"domain": domain, "record_name": name, "reason": type(exc).__name__},
        )
        return False


def _read_capped(response, *, deadline: float, max_bytes: int) -> bytes | None:
    """Read the body until EOF; None when the deadline or byte cap is hit first."""
    body = bytearray()
    # Single-byte reads return as soon as data arrives, so a server that
    # drips bytes cannot keep one read open past the deadline.
    for chunk in response.iter_content(chunk_size=1):
        body.extend(chunk)
        if len(body) > max_bytes or monotonic() > deadline:
            return None
    return bytes(body)


def check_file(
    domain: str,
    token: str,
    *,
    http_get: Callable[..., requests.Response] | None = None,
    path: str = FILE_CHALLENGE_PATH,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
    max_bytes: int = DEFAULT_MAX_BODY_BYTES,
) -> bool:
    url = file_challenge_url(domain, path)
    get = http_get or requests.get
    deadline = monotonic() + timeout
    try:
        with get(url, headers={"User-Agent": user_agent}, timeout=timeout, stream=True) as response:
            if not 200 <= response.status_code < 300:
                logger.info(
                    "challenge.file.bad_status",
                    extra={"domain": domain, "url": url, "status_code": response.status_code},
                )
                return False
            body = _read_capped(response, deadline=deadline, max_bytes=max_bytes)
            encoding = response.encoding or "utf-8"
    except (requests.RequestException, OSError, ValueError) as exc:
        logger.info(
            "challenge.file.fetch_failed",
            extra={"domain": domain, "url": url, "reason": type(exc).__name__},
        )
        return False

    if body is None:
        logger.info(
            "challenge.file.body_limit",
            extra={"domain": domain, "url": url, "max_bytes": max_bytes, "timeout": timeout},
        )
        return False
    try:
        text = body.decode(encoding, errors="replace")
    except LookupError:
        text = body.decode("utf-8", errors="replace")
    return text.strip() == token.strip()


def build_challenge_checks(
    *,
    dns_subdomain: str = DNS_CHALLENGE_SUBDOMAIN,
    file_path: str = FILE_CHALLENGE_PATH,
    dns_timeout: float = DEFAULT_TIMEOUT_SECONDS,
    http_timeout: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
    file_max_bytes: int = DEFAULT_MAX_BODY_BYTES,
) -> dict[VerificationMethodEnum, ChallengeCheck]:
    """Bind configuration into one checker per method; the mapping is exhaustive."""
    return {
        VerificationMethodEnum.DNS: partial(check_dns, subdomain=dns_subdomain, timeout=dns_timeout),
        VerificationMethodEnum.FILE: partial(
            check_file,
            path=file_path,
            timeout=http_timeout,
            user_agent=user_agent,
            max_bytes=file_max_bytes,
        ),
    }

"""Line-oriented zone file reader built on the dnspython tokenizer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import dns.exception
import dns.name
import dns.rdataclass
import dns.rdatatype
import dns.tokenizer
import dns.ttl

from .models import DEFAULT_TTL, as_zone_name


@dataclass(frozen=True)
class ZoneEntry:
    """One record line as read from a zone file, with its rdata still in text form."""

    name: dns.name.Name
    ttl: int
    rdclass: dns.rdataclass.RdataClass
    rdtype: dns.rdatatype.RdataType
    content: str
    origin: dns.name.Name


def _read_ttl_and_class(
    tok: dns.tokenizer.Tokenizer, ttl: int
) -> tuple[int, dns.rdataclass.RdataClass, dns.tokenizer.Token]:
    """Consume optional TTL and class fields (either order) and return the type token."""
    rdclass = dns.rdataclass.IN
    seen_ttl = seen_class = False
    token = tok.get()
    for _ in range(2):
        if not token.is_identifier():
            raise dns.exception.SyntaxError("expected a record type")
        if not seen_ttl:
            try:
                ttl = dns.ttl.from_text(token.value)
                seen_ttl = True
                token = tok.get()
                continue
            except dns.ttl.BadTTL:
                pass
        if not seen_class:
            try:
                rdclass = dns.rdataclass.from_text(token.value)
                seen_class = True
                token = tok.get()
                continue
            except dns.rdataclass.UnknownRdataclass:
                pass
        break
    if not token.is_identifier():
        raise dns.exception.SyntaxError("expected a record type")
    return ttl, rdclass, token


def _read_content(tok: dns.tokenizer.Tokenizer) -> str:
    """Collect the rest of the record as text, re-quoting quoted strings."""
    parts: list[str] = []
    while True:
        token = tok.get()
        if token.is_eol_or_eof():
            if token.is_eof():
                tok.unget(token)
            break
        if token.is_quoted_string():
            parts.append(f'"{token.value}"')
        else:
            parts.append(token.value)
    return " ".join(parts)


def iter_zone_entries(
    path: str | Path,
    origin: str | dns.name.Name,
    default_ttl: int = DEFAULT_TTL,
) -> Iterator[ZoneEntry]:
    """Yield the records of a zone file in file order.

    Owner names are returned absolute. Each call opens the file afresh, so the
    sequence can be restarted by calling again.
    """
    current_origin = as_zone_name(origin)
    ttl = default_ttl
    last_name = current_origin
    with open(path, encoding="utf-8") as handle:
        tok = dns.tokenizer.Tokenizer(handle, filename=str(path))
        while True:
            token = tok.get(want_leading=True)
            if token.is_eof():
                return
            if token.is_eol():
                continue
            if token.is_whitespace():
                token = tok.get()
                if token.is_eol_or_eof():
                    tok.unget(token)
                    continue
                tok.unget(token)
                name = last_name
            elif token.value.startswith("$"):
                directive = token.value.upper()
                if directive == "$ORIGIN":
                    current_origin = tok.get_name(current_origin)
                    tok.get_eol()
                elif directive == "$TTL":
                    ttl = tok.get_ttl()
                    tok.get_eol()
                else:
                    raise dns.exception.SyntaxError(f"unsupported directive {token.value}")
                continue
            else:
                name = dns.name.from_text(token.value, current_origin)
            last_name = name

            record_ttl, rdclass, token = _read_ttl_and_class(tok, ttl)
            rdtype = dns.rdatatype.from_text(token.value)
            yield ZoneEntry(
                name=name,
                ttl=record_ttl,
                rdclass=rdclass,
                rdtype=rdtype,
                content=_read_content(tok),
                origin=current_origin,
            )

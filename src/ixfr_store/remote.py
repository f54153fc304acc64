"""SOA queries and zone transfers against a primary, built on dnspython."""

from __future__ import annotations

import dns.exception
import dns.message
import dns.name
import dns.query
import dns.rcode
import dns.rdatatype
import dns.rdtypes.ANY.SOA
import dns.tsigkeyring
import dns.zone

from .config import TsigKey
from .models import RecordSet, RemoteError, ResourceRecord, as_soa, as_zone_name

TSIG_FUDGE = 300


def _keyring(tsig: TsigKey) -> dict:
    """Build a dnspython keyring holding the single configured key."""
    return dns.tsigkeyring.from_text({tsig.name: (tsig.algorithm, tsig.secret)})


def _peer(address: str, port: int) -> str:
    return f"{address}:{port}"


def query_remote_soa(
    address: str,
    zone: str | dns.name.Name,
    tsig: TsigKey | None = None,
    port: int = 53,
    timeout: float | None = None,
) -> dns.rdtypes.ANY.SOA.SOA | None:
    """Ask the primary for the zone's SOA with a single UDP exchange.

    Returns the first answer record that holds SOA content, or None when the
    answer carries none.
    """
    origin = as_zone_name(zone)
    query = dns.message.make_query(origin, dns.rdatatype.SOA)
    if tsig is not None and tsig.algorithm:
        query.use_tsig(
            _keyring(tsig),
            keyname=tsig.name,
            fudge=TSIG_FUDGE,
            original_id=query.id,
            tsig_error=0,
        )

    peer = _peer(address, port)
    try:
        reply = dns.query.udp(query, address, timeout=timeout, port=port)
    except (OSError, dns.exception.DNSException) as exc:
        raise RemoteError(f"SOA query for {origin} to '{peer}' failed: {exc}", address=peer) from exc

    rcode = reply.rcode()
    if rcode != dns.rcode.NOERROR:
        rcode_text = dns.rcode.to_text(rcode)
        raise RemoteError(
            f"Unable to retrieve SOA serial from primary '{peer}': {rcode_text}",
            address=peer,
            rcode=rcode_text,
        )

    for rrset in reply.answer:
        if rrset.rdtype != dns.rdatatype.SOA:
            continue
        for rdata in rrset:
            soa = as_soa(rdata)
            if soa is not None:
                return soa
    return None


def query_remote_serial(
    address: str,
    zone: str | dns.name.Name,
    tsig: TsigKey | None = None,
    port: int = 53,
    timeout: float | None = None,
) -> int | None:
    """Return the primary's current serial for zone, or None if it sent no SOA."""
    soa = query_remote_soa(address, zone, tsig=tsig, port=port, timeout=timeout)
    return soa.serial if soa is not None else None


def fetch_zone_records(
    address: str,
    zone: str | dns.name.Name,
    tsig: TsigKey | None = None,
    port: int = 53,
    timeout: float | None = None,
) -> RecordSet:
    """Transfer the zone with AXFR and return its records relative to the origin."""
    origin = as_zone_name(zone)
    peer = _peer(address, port)
    keyring = keyname = None
    if tsig is not None and tsig.algorithm:
        keyring = _keyring(tsig)
        keyname = tsig.name

    try:
        xfr = dns.query.xfr(
            where=address,
            zone=origin,
            port=port,
            keyring=keyring,
            keyname=keyname,
            relativize=False,
            timeout=timeout,
        )
        transferred = dns.zone.from_xfr(xfr, relativize=False)
    except (OSError, dns.exception.DNSException) as exc:
        raise RemoteError(f"AXFR failed for zone {origin} from '{peer}': {exc}", address=peer) from exc

    records = RecordSet()
    for name, ttl, rdata in transferred.iterate_rdatas():
        records.add(
            ResourceRecord(
                name=name.relativize(origin),
                rdtype=rdata.rdtype,
                content=rdata,
                ttl=ttl,
                rdclass=rdata.rdclass,
            )
        )
    return records

"""Tests for the zone file reader."""

import dns.exception
import dns.name
import dns.rdataclass
import dns.rdatatype
import pytest

from ixfr_store.zoneparser import iter_zone_entries

ZONE_TEXT = """$ORIGIN example.com.
$TTL 300
@ IN SOA ns1 hostmaster (
        42 ; serial
        3600 600 86400 3600 )
  IN NS ns1
; a comment line

www 60 IN A 192.0.2.10
    IN 120 A 192.0.2.11
txt TXT "hello world"
$ORIGIN sub.example.com.
host A 192.0.2.20
"""


@pytest.fixture
def zone_file(tmp_path):
    """Zone file exercising directives and record forms."""
    path = tmp_path / "example.com.zone"
    path.write_text(ZONE_TEXT, encoding="utf-8")
    return path


class TestIterZoneEntries:
    """Tests for iter_zone_entries."""

    def test_entry_order_and_types(self, zone_file):
        entries = list(iter_zone_entries(zone_file, "example.com."))
        assert [dns.rdatatype.to_text(e.rdtype) for e in entries] == ["SOA", "NS", "A", "A", "TXT", "A"]

    def test_parentheses_and_comments(self, zone_file):
        soa = next(iter_zone_entries(zone_file, "example.com."))
        assert soa.name == dns.name.from_text("example.com.")
        assert soa.content == "ns1 hostmaster 42 3600 600 86400 3600"
        assert soa.ttl == 300

    def test_blank_owner_repeats_previous(self, zone_file):
        entries = list(iter_zone_entries(zone_file, "example.com."))
        assert entries[1].name == dns.name.from_text("example.com.")
        assert entries[3].name == dns.name.from_text("www.example.com.")

    def test_ttl_and_class_in_either_order(self, zone_file):
        entries = list(iter_zone_entries(zone_file, "example.com."))
        assert entries[2].ttl == 60
        assert entries[3].ttl == 120
        assert entries[3].rdclass == dns.rdataclass.IN

    def test_quoted_strings_are_requoted(self, zone_file):
        entries = list(iter_zone_entries(zone_file, "example.com."))
        assert entries[4].content == '"hello world"'
        assert entries[4].ttl == 300

    def test_origin_directive(self, zone_file):
        last = list(iter_zone_entries(zone_file, "example.com."))[-1]
        assert last.name == dns.name.from_text("host.sub.example.com.")
        assert last.origin == dns.name.from_text("sub.example.com.")

    def test_restartable(self, zone_file):
        first = list(iter_zone_entries(zone_file, "example.com."))
        second = list(iter_zone_entries(zone_file, "example.com."))
        assert first == second

    def test_default_ttl(self, tmp_path):
        path = tmp_path / "zone"
        path.write_text("www A 192.0.2.1\n", encoding="utf-8")
        (entry,) = iter_zone_entries(path, "example.com.", default_ttl=1234)
        assert entry.ttl == 1234
        assert entry.name == dns.name.from_text("www.example.com.")

    def test_unsupported_directive(self, tmp_path):
        path = tmp_path / "zone"
        path.write_text("$INCLUDE other.zone\n", encoding="utf-8")
        with pytest.raises(dns.exception.SyntaxError):
            list(iter_zone_entries(path, "example.com."))

    def test_missing_type(self, tmp_path):
        path = tmp_path / "zone"
        path.write_text("www 300 IN\n", encoding="utf-8")
        with pytest.raises(dns.exception.SyntaxError):
            list(iter_zone_entries(path, "example.com."))

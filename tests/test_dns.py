"""Tests for the DNS extractors."""

from rtxconf.extract.dns import (
    DNSHostExtractor,
    DNSServerExtractor,
    DNSServerSelectExtractor,
    dns_lines,
)
from rtxconf.ingest.parser import build_stream
from rtxconf.models import DNSHost, NameServer


class TestDNSLines:
    def test_continuation_joined(self):
        stream = build_stream("dns server select 1 10.0.0.1 edns\n=on any .")
        joined = dns_lines(stream)
        assert len(joined) == 1
        cmd, text = joined[0]
        assert text == "dns server select 1 10.0.0.1 edns=on any ."
        assert cmd.number == 1

    def test_continuation_after_other_command_ignored(self):
        stream = build_stream("dns server 10.0.0.1\nip route default gateway pp 1\n=on")
        assert [text for _, text in dns_lines(stream)] == ["dns server 10.0.0.1"]

    def test_scoped_dns_lines_ignored(self):
        stream = build_stream("pp select 1\n dns server 10.0.0.1")
        assert dns_lines(stream) == []


class TestDNSServerSelect:
    def test_sample(self, sample_stream):
        selectors = DNSServerSelectExtractor().extract(sample_stream)
        assert len(selectors) == 1
        sel = selectors[0]
        assert sel.selector_id == 1
        assert sel.servers == ["10.0.0.1", "10.0.0.2"]
        assert sel.edns is True
        assert sel.record_type == "any"
        assert sel.query_pattern == "."
        assert sel.restrict_pp == 1

    def test_wrapped_selector(self):
        stream = build_stream("dns server select 7 10.0.0.1 edns\n=on a example.com")
        sel = DNSServerSelectExtractor().extract(stream)[0]
        assert sel.edns is True
        assert sel.record_type == "a"

    def test_edns_after_each_server(self):
        stream = build_stream("dns server select 1 10.0.0.1 edns=on 10.0.0.2 edns=on any .")
        sel = DNSServerSelectExtractor().extract(stream)[0]
        assert sel.servers == ["10.0.0.1", "10.0.0.2"]
        assert sel.server_edns == [True, True]
        assert sel.record_type == "any"
        assert sel.query_pattern == "."

    def test_incomplete_selectors_skipped(self):
        stream = build_stream("dns server select 2 10.0.0.1\ndns server select 3 example.com")
        assert DNSServerSelectExtractor().extract(stream) == []

    def test_sorted_by_id(self):
        stream = build_stream("dns server select 9 10.0.0.9 .\ndns server select 2 10.0.0.2 .")
        assert [s.selector_id for s in DNSServerSelectExtractor().extract(stream)] == [2, 9]


class TestDNSServers:
    def test_sample(self, sample_stream):
        assert DNSServerExtractor().extract(sample_stream) == [
            NameServer(address="192.168.1.53", position=1),
            NameServer(address="8.8.8.8", position=2),
        ]

    def test_duplicates_and_pp_reference(self):
        stream = build_stream("dns server pp 1\ndns server 10.0.0.1 10.0.0.1 10.0.0.2")
        servers = DNSServerExtractor().extract(stream)
        assert [s.address for s in servers] == ["10.0.0.1", "10.0.0.2"]


class TestDNSHosts:
    def test_sample(self, sample_stream):
        assert DNSHostExtractor().extract(sample_stream) == [
            DNSHost(name="example.local", address="192.168.1.10"),
        ]

    def test_record_types(self):
        stream = build_stream(
            "dns static host2 10.0.0.2\n"
            "dns static aaaa host1 2001:db8::1\n"
            "dns static a host1 10.0.0.1"
        )
        hosts = DNSHostExtractor().extract(stream)
        assert [(h.name, h.record_type) for h in hosts] == [
            ("host1", "a"), ("host1", "aaaa"), ("host2", "a"),
        ]

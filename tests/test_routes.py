"""Tests for the static route extractor."""

import pytest

from rtxconf.errors import MalformedTokenError
from rtxconf.extract.routes import StaticRouteExtractor
from rtxconf.ingest.parser import build_stream


@pytest.fixture
def extractor():
    return StaticRouteExtractor()


class TestStaticRoutes:
    def test_sample(self, extractor, sample_stream):
        routes = extractor.extract(sample_stream)
        assert [(r.prefix, r.mask) for r in routes] == [
            ("0.0.0.0", "0.0.0.0"),
            ("10.10.0.0", "255.255.0.0"),
            ("172.16.0.0", "255.255.255.0"),
        ]

    def test_default_via_pp(self, extractor, sample_stream):
        default = extractor.extract(sample_stream)[0]
        assert len(default.next_hops) == 1
        assert default.next_hops[0].interface == "pp 1"
        assert default.next_hops[0].gateway == ""

    def test_ecmp_on_one_line(self, extractor, sample_stream):
        route = extractor.extract(sample_stream)[1]
        assert [(h.gateway, h.weight) for h in route.next_hops] == [
            ("192.168.1.254", 2), ("192.168.1.253", 1),
        ]

    def test_hide_option(self, extractor, sample_stream):
        hop = extractor.extract(sample_stream)[2].next_hops[0]
        assert hop.interface == "tunnel 1"
        assert hop.hide is True

    def test_hops_accumulate_across_lines(self, extractor):
        stream = build_stream(
            "ip route 10.0.0.0/8 gateway 192.168.0.1\n"
            "ip route 10.0.0.0/8 gateway 192.168.0.2 filter 100 101 keepalive 1"
        )
        routes = extractor.extract(stream)
        assert len(routes) == 1
        second = routes[0].next_hops[1]
        assert second.filters == [100, 101]
        assert second.keepalive is True

    def test_host_route_and_null(self, extractor):
        routes = extractor.extract(build_stream("ip route 192.0.2.1 gateway null"))
        assert routes[0].mask == "255.255.255.255"
        assert routes[0].next_hops[0].interface == "null"

    def test_named_hop(self, extractor):
        stream = build_stream("ip route 10.1.0.0/16 gateway dhcp lan2 name branch office weight 3")
        hop = extractor.extract(stream)[0].next_hops[0]
        assert hop.interface == "dhcp lan2"
        assert hop.name == "branch office"
        assert hop.weight == 3

    def test_scoped_lines_ignored(self, extractor):
        stream = build_stream("pp select 1\n ip route default gateway pp 1")
        assert extractor.extract(stream) == []

    @pytest.mark.parametrize("line", [
        "ip route 10.0.0/8 gateway pp 1",
        "ip route 10.0.0.0/33 gateway pp 1",
    ])
    def test_malformed_destination(self, extractor, line):
        with pytest.raises(MalformedTokenError) as exc:
            extractor.extract(build_stream(line))
        assert exc.value.extractor == "static_routes"
        assert exc.value.line_number == 1

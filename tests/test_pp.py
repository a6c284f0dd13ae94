"""Tests for the PP interface extractor."""

from rtxconf.extract.pp import PPInterfaceExtractor
from rtxconf.ingest.parser import build_stream


class TestPPInterfaces:
    def test_sample(self, sample_stream):
        interfaces = PPInterfaceExtractor().extract(sample_stream)
        assert [(p.pp_id, p.name) for p in interfaces] == [(0, "anonymous"), (1, "")]

    def test_pppoe_interface(self, sample_stream):
        pp1 = PPInterfaceExtractor().extract(sample_stream)[1]
        assert pp1.description == "PRV"
        assert pp1.pppoe_interface == "lan2"
        assert pp1.auth_accept == ["pap", "chap"]
        assert (pp1.username, pp1.password) == ("isp-user", "isp-pass")
        assert pp1.always_on is True
        assert pp1.mtu == 1454
        assert pp1.nat_descriptor == 1000
        assert pp1.secure_filter_in == [200003, 200020]
        assert pp1.dynamic_filter_in == [200080]
        assert pp1.dynamic_filter_out == []
        assert pp1.enabled is True

    def test_anonymous(self, sample_stream):
        anon = PPInterfaceExtractor().extract(sample_stream)[0]
        assert anon.bind == "tunnel2"
        assert anon.auth_request == "mschap-v2"
        assert anon.mtu == 1258
        assert anon.enabled is True

    def test_not_enabled(self):
        pp = PPInterfaceExtractor().extract(build_stream("pp select 2\n pp disconnect time 60"))[0]
        assert pp.enabled is False
        assert pp.disconnect_time == "60"

    def test_reentered_scope_merges(self):
        stream = build_stream(
            "pp select 1\n"
            " ip pp address 203.0.113.2/30\n"
            "pp select 2\n"
            " ip pp mtu 1400\n"
            "pp select 1\n"
            " ip pp mtu 1454"
        )
        interfaces = PPInterfaceExtractor().extract(stream)
        assert len(interfaces) == 2
        assert interfaces[0].ip_address == "203.0.113.2/30"
        assert interfaces[0].mtu == 1454

    def test_enable_for_unknown_pp_ignored(self):
        assert PPInterfaceExtractor().extract(build_stream("pp enable 9")) == []

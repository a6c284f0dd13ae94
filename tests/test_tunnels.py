"""Tests for the tunnel extractor and tunnel / anonymous-PP correlation."""

import pytest

from rtxconf.extract.tunnels import (
    MERGE_PRECEDENCE,
    L2TPServiceExtractor,
    TunnelExtractor,
    merge_correlated,
)
from rtxconf.ingest.parser import build_stream
from rtxconf.models import L2TPAuth, L2TPIPPool, L2TPService, Tunnel, TunnelL2TP

ANONYMOUS_BLOCK = (
    "pp select anonymous\n"
    " pp bind tunnel3\n"
    " pp auth accept chap\n"
    " pp auth myname lns-user lns-pass\n"
    " ip pp remote address pool 10.9.0.10-10.9.0.20\n"
    " pp enable anonymous\n"
)

TUNNEL_BLOCK = (
    "tunnel select 3\n"
    " tunnel encapsulation l2tp\n"
    " ipsec tunnel 103\n"
    "  ipsec sa policy 103 3 esp aes-cbc sha-hmac\n"
    "  ipsec ike pre-shared-key 3 text k3\n"
    " l2tp tunnel auth on tsecret\n"
    " l2tp keepalive use on 60 3\n"
    "tunnel enable 3\n"
)


@pytest.fixture
def extractor():
    return TunnelExtractor()


def tunnels_by_id(stream):
    return {t.tunnel_id: t for t in TunnelExtractor().extract(stream)}


class TestTunnelExtraction:
    def test_sample_ids(self, extractor, sample_stream):
        assert [t.tunnel_id for t in extractor.extract(sample_stream)] == [1, 2]

    def test_ipsec_site_to_site(self, sample_stream):
        tunnel = tunnels_by_id(sample_stream)[1]
        assert tunnel.enabled is True
        assert tunnel.description == "HQ-VPN"
        assert tunnel.l2tp is None
        ipsec = tunnel.ipsec
        assert ipsec.ipsec_tunnel_id == 101
        assert ipsec.sa_policy == "101 1 esp aes-cbc sha-hmac"
        assert ipsec.local_address == "192.168.1.1"
        assert ipsec.remote_address == "203.0.113.1"
        assert ipsec.pre_shared_key == "hq-secret"
        assert ipsec.keepalive == "dpd 10 3"
        assert ipsec.tcp_mss == "auto"

    def test_global_ike_lines_follow_gateway(self, sample_stream):
        tunnels = tunnels_by_id(sample_stream)
        assert tunnels[1].ipsec.encryption == "aes-cbc"
        assert tunnels[1].ipsec.group == "modp1024"
        assert tunnels[1].ipsec.hash == "sha"
        assert tunnels[2].ipsec.encryption == ""

    def test_gateway_differs_from_tunnel_id(self):
        stream = build_stream(
            "tunnel select 1\n"
            " ipsec tunnel 101\n"
            "  ipsec sa policy 101 7 esp aes-cbc sha-hmac\n"
            "ipsec ike encryption 7 aes256-cbc\n"
            "ipsec ike encryption 1 3des-cbc"
        )
        assert tunnels_by_id(stream)[1].ipsec.encryption == "aes256-cbc"

    def test_l2tpv3(self, l2tpv3_stream):
        tunnel = tunnels_by_id(l2tpv3_stream)[1]
        assert tunnel.encapsulation == "l2tpv3"
        assert tunnel.mode == "l2vpn"
        assert tunnel.enabled is True
        assert tunnel.ipsec.ipsec_tunnel_id == 101
        assert tunnel.l2tp.tunnel_auth is True
        assert tunnel.l2tp.tunnel_auth_secret == "secret"

    def test_l2tpv3_endpoints(self):
        stream = build_stream(
            "tunnel select 5\n"
            " tunnel encapsulation l2tpv3\n"
            " tunnel endpoint address 192.168.0.1 203.0.113.9\n"
            " tunnel endpoint name peer.example fqdn\n"
            " l2tp hostname rtx-a\n"
            " l2tp local router-id 192.168.0.1\n"
            " l2tp remote router-id 192.168.0.2\n"
            " l2tp remote end-id shared\n"
            " l2tp always-on on\n"
            " l2tp syslog on"
        )
        l2tp = tunnels_by_id(stream)[5].l2tp
        assert (l2tp.endpoint_local, l2tp.endpoint_remote) == ("192.168.0.1", "203.0.113.9")
        assert l2tp.endpoint_name == "peer.example"
        assert l2tp.hostname == "rtx-a"
        assert l2tp.remote_router_id == "192.168.0.2"
        assert l2tp.remote_end_id == "shared"
        assert l2tp.always_on is True
        assert l2tp.syslog is True

    def test_reentered_tunnel_merges_by_id(self):
        stream = build_stream(
            "tunnel select 1\n"
            " description first\n"
            "tunnel select 2\n"
            "tunnel select 1\n"
            " ip tunnel secure filter in 100 101"
        )
        tunnels = tunnels_by_id(stream)
        assert sorted(tunnels) == [1, 2]
        assert tunnels[1].description == "first"
        assert tunnels[1].ipsec.secure_filter_in == [100, 101]

    def test_dynamic_secure_filters_kept_apart(self):
        stream = build_stream(
            "tunnel select 1\n"
            " ip tunnel secure filter out 200 201 dynamic 300 301"
        )
        ipsec = tunnels_by_id(stream)[1].ipsec
        assert ipsec.secure_filter_out == [200, 201]
        assert ipsec.dynamic_filter_out == [300, 301]
        assert ipsec.dynamic_filter_in == []

    def test_enable_for_unknown_tunnel_ignored(self):
        assert tunnels_by_id(build_stream("tunnel enable 9")) == {}


class TestAnonymousCorrelation:
    def test_sample_l2tp_server(self, sample_stream):
        tunnel = tunnels_by_id(sample_stream)[2]
        assert tunnel.encapsulation == "l2tp"
        assert tunnel.mode == "lns"
        assert tunnel.enabled is True
        assert tunnel.ipsec.pre_shared_key == "l2tp-secret"
        assert tunnel.l2tp.disconnect_time == "off"
        assert tunnel.l2tp.authentication == L2TPAuth(method="mschap-v2")
        assert tunnel.l2tp.ip_pool == L2TPIPPool(start="192.168.1.200", end="192.168.1.210")

    def test_merged_fields(self):
        tunnel = tunnels_by_id(build_stream(TUNNEL_BLOCK + ANONYMOUS_BLOCK))[3]
        assert tunnel.l2tp.tunnel_auth_secret == "tsecret"
        assert (tunnel.l2tp.keepalive_interval, tunnel.l2tp.keepalive_retry) == (60, 3)
        assert tunnel.l2tp.authentication == L2TPAuth(method="chap", username="lns-user",
                                                      password="lns-pass")
        assert tunnel.l2tp.ip_pool.start == "10.9.0.10"

    def test_order_independent(self):
        forward = TunnelExtractor().extract(build_stream(TUNNEL_BLOCK + ANONYMOUS_BLOCK))
        reverse = TunnelExtractor().extract(build_stream(ANONYMOUS_BLOCK + TUNNEL_BLOCK))
        assert forward == reverse

    def test_unbound_anonymous_uses_id_zero(self):
        stream = build_stream(
            "pp select anonymous\n"
            " pp auth accept chap\n"
            " ip pp remote address pool 10.0.0.1-10.0.0.9"
        )
        tunnels = TunnelExtractor().extract(stream)
        assert len(tunnels) == 1
        assert tunnels[0].tunnel_id == 0
        assert tunnels[0].enabled is False
        assert tunnels[0].ipsec is None

    def test_irrelevant_anonymous_block(self):
        stream = build_stream("pp select anonymous\n ip pp mtu 1258\npp enable anonymous")
        assert TunnelExtractor().extract(stream) == []


class TestMergePrecedence:
    def test_first_non_empty_wins(self):
        tunnel = Tunnel(tunnel_id=3, encapsulation="l2tp", description="lns",
                        l2tp=TunnelL2TP(hostname="from-tunnel",
                                        authentication=L2TPAuth(method="pap")))
        candidate = Tunnel(tunnel_id=3, encapsulation="l2tpv2", enabled=True, mode="lns",
                           l2tp=TunnelL2TP(hostname="from-pp",
                                           authentication=L2TPAuth(method="chap"),
                                           ip_pool=L2TPIPPool("10.0.0.1", "10.0.0.9")))
        merged = merge_correlated(tunnel, candidate)
        assert merged.encapsulation == "l2tp"
        assert merged.description == "lns"
        assert merged.enabled is True
        assert merged.mode == "lns"
        assert merged.l2tp.hostname == "from-tunnel"
        assert merged.l2tp.authentication.method == "chap"
        assert merged.l2tp.ip_pool.end == "10.0.0.9"

    def test_candidate_alone(self):
        candidate = Tunnel(tunnel_id=4, encapsulation="l2tp", enabled=True, mode="lns",
                           l2tp=TunnelL2TP(ip_pool=L2TPIPPool("10.0.0.1", "10.0.0.9")))
        assert merge_correlated(None, candidate) == candidate

    def test_pp_side_fields(self):
        pp_first = {path for path, order in MERGE_PRECEDENCE.items() if order[0] == "pp"}
        assert pp_first == {"l2tp.authentication", "l2tp.ip_pool"}


class TestL2TPService:
    def test_sample(self, sample_stream):
        assert L2TPServiceExtractor().extract(sample_stream) == [L2TPService(enabled=True)]

    def test_protocols_and_last_wins(self):
        stream = build_stream("l2tp service off\nl2tp service on l2tpv3 l2tp")
        service = L2TPServiceExtractor().extract(stream)[0]
        assert service.enabled is True
        assert service.protocols == ["l2tpv3", "l2tp"]

    def test_absent(self):
        assert L2TPServiceExtractor().extract(build_stream("ip lan1 address 10.0.0.1/24")) == []

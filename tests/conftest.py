"""Shared test fixtures."""

import pytest
from pathlib import Path

from rtxconf.ingest.parser import ConfigParser, build_stream

SAMPLE_RTX_CONFIG = """# RTX1210 Rev.14.01.38 (Fri Jul  1 12:00:00 2022)
# MAC Address : 00:a0:de:00:00:01
login password encrypted ABCDEF
administrator password encrypted 123456
login user admin encrypted XYZ
ip route default gateway pp 1
ip route 10.10.0.0/16 gateway 192.168.1.254 weight 2 gateway 192.168.1.253 weight 1
ip route 172.16.0.0/24 gateway tunnel 1 hide
ip lan1 address 192.168.1.1/24
pp select 1
 description pp PRV
 pp always-on on
 pppoe use lan2
 pp auth accept pap chap
 pp auth myname isp-user isp-pass
 ppp lcp mru on 1454
 ip pp mtu 1454
 ip pp secure filter in 200003 200020 dynamic 200080
 ip pp nat descriptor 1000
pp enable 1
pp select anonymous
 pp bind tunnel2
 pp auth request mschap-v2
 pp auth accept mschap-v2
 pp auth username vpnuser vpnpass
 ppp ipcp ipaddress on
 ip pp remote address pool 192.168.1.200-192.168.1.210
 ip pp mtu 1258
 pp enable anonymous
tunnel select 1
 description HQ-VPN
 ipsec tunnel 101
  ipsec sa policy 101 1 esp aes-cbc sha-hmac
  ipsec ike keepalive use 1 on dpd 10 3
  ipsec ike local address 1 192.168.1.1
  ipsec ike pre-shared-key 1 text hq-secret
  ipsec ike remote address 1 203.0.113.1
 ip tunnel tcp mss limit auto
tunnel enable 1
tunnel select 2
 tunnel encapsulation l2tp
 ipsec tunnel 102
  ipsec sa policy 102 2 esp aes-cbc sha-hmac
  ipsec ike pre-shared-key 2 text l2tp-secret
  ipsec ike remote address 2 any
 l2tp tunnel disconnect time off
 ip tunnel tcp mss limit auto
tunnel enable 2
ipsec ike encryption 1 aes-cbc
ipsec ike group 1 modp1024
ipsec ike hash 1 sha
ip filter 200000 reject 10.0.0.0/8 * * * *
ip filter 200003 reject * * established
ip filter 200020 pass * 192.168.1.0/24 tcp * www
ip filter 200099 pass * * * * *
ip filter dynamic 200080 * * ftp syslog on
ip filter dynamic 200081 * * www
nat descriptor type 1000 masquerade
nat descriptor address outer 1000 primary
nat descriptor masquerade static 1000 1 192.168.1.1:500=192.168.1.1:500 udp
nat descriptor type 2000 static
nat descriptor static 2000 203.0.113.10=192.168.1.10 1
ipsec auto refresh on
dhcp service server
dhcp server rfc2131 compliant except remain-silent
dhcp scope 1 192.168.1.2-192.168.1.191/24 gateway 192.168.1.1 expire 24:00
dhcp scope option 1 dns=192.168.1.1,8.8.8.8 domain=example.local
dhcp scope bind 1 192.168.1.20 00:A0:DE:12:34:56
dhcp scope bind 1 192.168.1.21 ethernet 00-a0-de-65-43-21
dns server 192.168.1.53 8.8.8.8
dns server select 1 10.0.0.1 10.0.0.2 edns=on any . restrict pp 1
dns static example.local 192.168.1.10
dns private address spoof on
l2tp service on
sshd service on
sshd host lan1
sshd auth method password
httpd host lan1
"""

# The L2TPv3 tunnel used as a worked example of nested scopes.
SAMPLE_L2TPV3_CONFIG = (
    "tunnel select 1\n"
    " tunnel encapsulation l2tpv3\n"
    " ipsec tunnel 101\n"
    "  ipsec sa policy 101 1 esp aes-cbc sha-hmac\n"
    " l2tp tunnel auth on secret\n"
    "tunnel enable 1"
)


@pytest.fixture
def sample_config():
    return SAMPLE_RTX_CONFIG


@pytest.fixture
def sample_stream():
    return build_stream(SAMPLE_RTX_CONFIG)


@pytest.fixture
def l2tpv3_stream():
    return build_stream(SAMPLE_L2TPV3_CONFIG)


@pytest.fixture
def parser():
    return ConfigParser()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "branch-rtx.conf"
    path.write_text(SAMPLE_RTX_CONFIG)
    return path


@pytest.fixture
def settings_file(tmp_path):
    def _write(content: str) -> Path:
        path = tmp_path / "settings.yaml"
        path.write_text(content)
        return path
    return _write

"""Tests for remote/local address selection."""

import pytest

from errors import NoConnection
from models import Connection
from services.connections import select_addresses, select_local, select_remote


def conn(protocol="https", address="1.2.3.4", port=32400, local=False, uri=None) -> Connection:
    if uri is None:
        uri = f"{protocol}://{address}:{port}"
    return Connection(protocol=protocol, address=address, port=port, local=local, uri=uri)


class TestSelectRemote:

    def test_prefers_relay_domain(self):
        plain = conn(address="1.2.3.4")
        relay = conn(address="1.2.3.4", uri="https://1-2-3-4.abc.plex.direct:32400")

        assert select_remote([plain, relay]) == relay.uri

    def test_first_remote_https_without_relay(self):
        first = conn(address="5.6.7.8")
        second = conn(address="9.9.9.9")

        assert select_remote([conn(protocol="http", address="1.1.1.1"), first, second]) == first.uri

    def test_ignores_local_relay_entries(self):
        local_relay = conn(address="192.168.1.2", local=True, uri="https://192-168-1-2.abc.plex.direct:32400")
        public = conn(address="5.6.7.8")

        assert select_remote([local_relay, public]) == public.uri

    def test_falls_back_to_any_https(self):
        local_https = conn(address="192.168.1.2", local=True)

        assert select_remote([conn(protocol="http", address="5.6.7.8"), local_https]) == local_https.uri

    def test_falls_back_to_first_overall(self):
        first = conn(protocol="http", address="5.6.7.8")

        assert select_remote([first, conn(protocol="http", address="1.1.1.1")]) == first.uri


class TestSelectLocal:

    def test_prefers_non_loopback(self):
        loopback = conn(protocol="http", address="127.0.0.1", local=True)
        lan = conn(protocol="http", address="192.168.1.10", local=True)

        assert select_local([loopback, lan]) == "http://192.168.1.10:32400"

    def test_loopback_only_is_used(self):
        loopback = conn(protocol="http", address="127.0.0.1", port=32401, local=True)

        assert select_local([loopback]) == "http://127.0.0.1:32401"

    def test_ignores_advertised_protocol_and_uri(self):
        lan = conn(address="10.0.0.5", local=True, uri="https://10-0-0-5.abc.plex.direct:32400")

        assert select_local([lan]) == "http://10.0.0.5:32400"

    def test_brackets_ipv6(self):
        v6 = conn(protocol="http", address="fd00::5", local=True)

        assert select_local([v6]) == "http://[fd00::5]:32400"

    def test_ipv6_loopback_skipped(self):
        v6_loop = conn(protocol="http", address="::1", local=True)
        lan = conn(protocol="http", address="10.0.0.5", local=True)

        assert select_local([v6_loop, lan]) == "http://10.0.0.5:32400"

    def test_none_without_local_entries(self):
        assert select_local([conn()]) is None


class TestSelectAddresses:

    def test_local_falls_back_to_remote(self):
        remote = conn(address="5.6.7.8", uri="https://5-6-7-8.abc.plex.direct:32400")

        result = select_addresses([remote])

        assert result.remote == remote.uri
        assert result.local == remote.uri

    def test_resolves_both(self):
        remote = conn(address="5.6.7.8", uri="https://5-6-7-8.abc.plex.direct:32400")
        lan = conn(protocol="http", address="192.168.1.10", local=True)

        result = select_addresses([lan, remote])

        assert result.remote == remote.uri
        assert result.local == "http://192.168.1.10:32400"

    def test_empty_list_raises(self):
        with pytest.raises(NoConnection):
            select_addresses([])

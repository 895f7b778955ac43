"""Tests for hop fragment construction."""

from __future__ import annotations

import pytest

from sudohop.descriptor import RemoteDescriptor
from sudohop.hops import build_hop, hop_method
from sudohop.parser import SEPARATE_SYNTAX, DescriptorParser
from sudohop.registry import TransportRegistry


@pytest.fixture
def parser():
    return DescriptorParser()


@pytest.fixture
def registry():
    return TransportRegistry(local_host_pattern="^localhost$")


class TestHopMethod:
    """Tests for hop method selection."""

    def test_keeps_shell_method(self, registry):
        """hop_method MUST keep methods with shell access."""
        d = RemoteDescriptor(method="sshx", host="web")
        assert hop_method(d, registry) == "sshx"

    def test_downgrades_copy_method(self, registry):
        """hop_method MUST use the canonical method for scp."""
        d = RemoteDescriptor(method="scp", host="web")
        assert hop_method(d, registry) == "ssh"


class TestBuildHop:
    """Tests for build_hop()."""

    def test_simple_ssh(self, parser, registry):
        """build_hop MUST produce method, user, host and port."""
        d = parser.parse("/ssh:bob@web#2222:/etc/hosts")
        assert build_hop(d, parser, registry) == "ssh:bob@web#2222|"

    def test_downgrade_scp(self, parser, registry):
        """build_hop MUST replace scp with ssh and keep user, host and port."""
        d = parser.parse("/scp:bob@web#2222:/etc/hosts")
        assert build_hop(d, parser, registry) == "ssh:bob@web#2222|"

    def test_downgrade_mount_style(self, parser, registry):
        """build_hop MUST replace mount-style methods with ssh."""
        d = parser.parse("/sftp:bob@files:/home/bob/x")
        assert build_hop(d, parser, registry) == "ssh:bob@files|"

    def test_keeps_deeper_chain(self, parser, registry):
        """build_hop MUST keep earlier hops in front."""
        d = parser.parse("/ssh:alice@gw|scp:bob@web:/srv/x")
        assert build_hop(d, parser, registry) == "ssh:alice@gw|ssh:bob@web|"

    def test_keeps_domain(self, parser, registry):
        """build_hop MUST keep the domain."""
        d = parser.parse("/smb:bob%CORP@fs:/share/x")
        assert build_hop(d, parser, registry) == "smb:bob%CORP@fs|"

    def test_elevation_hop(self, parser, registry):
        """build_hop MUST accept an already elevated address."""
        d = parser.parse("/sudo:root@localhost:/etc/shadow")
        assert build_hop(d, parser, registry) == "sudo:root@localhost|"

    def test_ipv6_host(self, parser, registry):
        """build_hop MUST keep IPv6 brackets."""
        d = parser.parse("/ssh:bob@[::1]:/x")
        assert build_hop(d, parser, registry) == "ssh:bob@[::1]|"

    def test_without_user(self, parser, registry):
        """build_hop MUST work without a user."""
        d = parser.parse("/ssh:web:/x")
        assert build_hop(d, parser, registry) == "ssh:web|"

    def test_separate_syntax(self, registry):
        """build_hop MUST use the delimiters of the parser's syntax."""
        parser = DescriptorParser(syntax=SEPARATE_SYNTAX)
        d = parser.parse("/[scp/bob@web]/x")
        assert build_hop(d, parser, registry) == "ssh/bob@web|"

    def test_does_not_modify_descriptor(self, parser, registry):
        """build_hop MUST leave its input descriptor unchanged."""
        d = parser.parse("/scp:bob@web:/x")
        build_hop(d, parser, registry)

        assert d.method == "scp"
        assert d.local_path == "/x"

    def test_fragment_is_valid_hop_chain(self, parser, registry):
        """The fragment MUST be usable as a hop chain."""
        d = parser.parse("/ssh:alice@gw|rsync:bob@web#2200:/x")
        fragment = build_hop(d, parser, registry)
        final = RemoteDescriptor(
            method="sudo", user="root", host="web", port=2200,
            local_path="/x", hop_chain=fragment,
        )

        assert parser.parse(parser.serialize(final)) == final

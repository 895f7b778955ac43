"""Decompose and compose remote file addresses.

Two address syntaxes are supported:

- ``default``:  ``/ssh:bob@host#2222|sudo:root@host:/etc/hosts``
- ``separate``: ``/[ssh/bob@host#2222|sudo/root@host]/etc/hosts``

The syntax is chosen once at startup with ``select_parser()``; everything else
works against the resulting DescriptorParser.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from sudohop.descriptor import RemoteDescriptor
from sudohop.exceptions import DescriptorParseError

logger = logging.getLogger(__name__)


# =============================================================================
# Delimiter helpers
# =============================================================================


def strip_prefix(s: str, prefix: str) -> str:
    """Remove one exact occurrence of ``prefix`` from the start of ``s``."""
    if prefix and s.startswith(prefix):
        return s[len(prefix):]
    return s


def strip_suffix(s: str, suffix: str) -> str:
    """Remove one exact occurrence of ``suffix`` from the end of ``s``."""
    if suffix and s.endswith(suffix):
        return s[: -len(suffix)]
    return s


# =============================================================================
# Address syntaxes
# =============================================================================


@dataclass(frozen=True)
class AddressSyntax:
    """Delimiters of a remote addressing scheme."""

    name: str
    prefix: str
    method_separator: str
    postfix: str
    hop_separator: str = "|"
    user_separator: str = "@"
    domain_separator: str = "%"
    port_separator: str = "#"
    bracket_ipv6: bool = False

    @property
    def delimiters(self) -> str:
        return "".join(
            {
                self.prefix,
                self.method_separator,
                self.postfix,
                self.hop_separator,
                self.user_separator,
                self.domain_separator,
                self.port_separator,
                "/",
                ":",
                "[",
                "]",
            }
        )

    @property
    def host_delimiters(self) -> str:
        # Hosts may hold colons (IPv6) unless a colon ends the host field.
        chars = set(self.delimiters)
        if not self.bracket_ipv6 and ":" not in (
            self.method_separator,
            self.postfix,
        ):
            chars.discard(":")
        return "".join(chars)


DEFAULT_SYNTAX = AddressSyntax(
    name="default",
    prefix="/",
    method_separator=":",
    postfix=":",
    bracket_ipv6=True,
)

SEPARATE_SYNTAX = AddressSyntax(
    name="separate",
    prefix="/[",
    method_separator="/",
    postfix="]",
)

SYNTAXES: dict[str, AddressSyntax] = {
    DEFAULT_SYNTAX.name: DEFAULT_SYNTAX,
    SEPARATE_SYNTAX.name: SEPARATE_SYNTAX,
}


def _char_class(excluded: str) -> str:
    return "[^" + "".join(re.escape(c) for c in sorted(set(excluded))) + r"\s]"


# =============================================================================
# DescriptorParser
# =============================================================================


@dataclass
class DescriptorParser:
    """Parse raw paths into RemoteDescriptors and serialize them back."""

    syntax: AddressSyntax = DEFAULT_SYNTAX
    _path_re: re.Pattern = field(init=False, repr=False)
    _hops_re: re.Pattern = field(init=False, repr=False)
    _method_re: re.Pattern = field(init=False, repr=False)
    _user_re: re.Pattern = field(init=False, repr=False)
    _host_re: re.Pattern = field(init=False, repr=False)

    def __post_init__(self) -> None:
        s = self.syntax
        method = r"[A-Za-z0-9-]+"
        user = _char_class(s.delimiters) + "*"
        host_plain = _char_class(s.host_delimiters) + "+"
        if s.bracket_ipv6:
            host = rf"(?:\[[0-9A-Fa-f:.]+\]|{host_plain})"
        else:
            host = host_plain

        def hop(named: bool) -> str:
            def g(name: str, pattern: str) -> str:
                return f"(?P<{name}>{pattern})" if named else f"(?:{pattern})"

            return (
                g("method", method)
                + re.escape(s.method_separator)
                + "(?:"
                + g("user", user)
                + "(?:"
                + re.escape(s.domain_separator)
                + g("domain", user)
                + ")?"
                + re.escape(s.user_separator)
                + ")?"
                + g("host", host)
                + "(?:"
                + re.escape(s.port_separator)
                + g("port", "[0-9]+")
                + ")?"
            )

        hops = f"(?:{hop(False)}{re.escape(s.hop_separator)})*"
        self._path_re = re.compile(
            "^"
            + re.escape(s.prefix)
            + f"(?P<hops>{hops})"
            + hop(True)
            + re.escape(s.postfix)
            + r"(?P<local_path>.*)\Z",
            re.DOTALL,
        )
        self._hops_re = re.compile(hops + r"\Z")
        self._method_re = re.compile(method + r"\Z")
        self._user_re = re.compile(user + r"\Z")
        self._host_re = re.compile(host_plain + r"\Z")

    @property
    def prefix(self) -> str:
        return self.syntax.prefix

    @property
    def postfix(self) -> str:
        return self.syntax.postfix

    @property
    def hop_separator(self) -> str:
        return self.syntax.hop_separator

    def is_remote(self, raw_path: str) -> bool:
        """Whether ``raw_path`` is a remote address in this syntax."""
        return self._path_re.match(raw_path) is not None

    def parse(self, raw_path: str) -> RemoteDescriptor | None:
        """Decompose a raw path.

        Args:
            raw_path: Path string, local or remote.

        Returns:
            RemoteDescriptor for remote addresses, None for local paths.

        Raises:
            DescriptorParseError: If the address matches but holds an invalid
                value (for example port 0).
        """
        match = self._path_re.match(raw_path)
        if match is None:
            return None

        host = match.group("host")
        if self.syntax.bracket_ipv6 and host.startswith("["):
            host = host[1:-1]
        port = match.group("port")

        try:
            return RemoteDescriptor(
                method=match.group("method"),
                user=match.group("user") or "",
                domain=match.group("domain") or "",
                host=host,
                port=int(port) if port is not None else None,
                local_path=match.group("local_path"),
                hop_chain=match.group("hops"),
            )
        except ValueError as e:
            raise DescriptorParseError(str(e), path=raw_path) from e

    def dissect(self, raw_path: str) -> RemoteDescriptor:
        """Decompose a path that must be remote.

        Raises:
            DescriptorParseError: If ``raw_path`` is not a remote address.
        """
        descriptor = self.parse(raw_path)
        if descriptor is None:
            raise DescriptorParseError(
                f"Not a remote file name: {raw_path}", path=raw_path
            )
        return descriptor

    def serialize(self, descriptor: RemoteDescriptor) -> str:
        """Compose a descriptor back into a raw path.

        Raises:
            DescriptorParseError: If a field holds characters that would make
                the result ambiguous.
        """
        s = self.syntax
        self._check(self._method_re, descriptor.method, "method")
        self._check(self._user_re, descriptor.user, "user")
        self._check(self._user_re, descriptor.domain, "domain")
        if descriptor.hop_chain and not self._hops_re.match(descriptor.hop_chain):
            raise DescriptorParseError(
                f"Malformed hop chain: {descriptor.hop_chain!r}"
            )

        host = descriptor.host
        if s.bracket_ipv6 and ":" in host:
            if not re.fullmatch(r"[0-9A-Fa-f:.]+", host):
                raise DescriptorParseError(f"Invalid IPv6 host: {host!r}")
            host = f"[{host}]"
        else:
            self._check(self._host_re, host, "host")

        user_part = ""
        if descriptor.domain:
            user_part = f"{descriptor.user}{s.domain_separator}{descriptor.domain}{s.user_separator}"
        elif descriptor.user:
            user_part = f"{descriptor.user}{s.user_separator}"

        port_part = ""
        if descriptor.port is not None:
            port_part = f"{s.port_separator}{descriptor.port}"

        return (
            f"{s.prefix}{descriptor.hop_chain}{descriptor.method}{s.method_separator}"
            f"{user_part}{host}{port_part}{s.postfix}{descriptor.local_path}"
        )

    def strip_prefix(self, s: str, prefix: str | None = None) -> str:
        """Strip the global prefix (or ``prefix``) from the start of ``s``."""
        return strip_prefix(s, self.prefix if prefix is None else prefix)

    def strip_suffix(self, s: str, suffix: str | None = None) -> str:
        """Strip the host postfix (or ``suffix``) from the end of ``s``."""
        return strip_suffix(s, self.postfix if suffix is None else suffix)

    @staticmethod
    def _check(pattern: re.Pattern, value: str, what: str) -> None:
        if not pattern.match(value):
            raise DescriptorParseError(f"Invalid {what}: {value!r}")


def available_syntaxes() -> list[str]:
    """Get the names of all address syntaxes."""
    return sorted(SYNTAXES)


def select_parser(name: str = "default") -> DescriptorParser:
    """Pick the parser for an address syntax.

    Args:
        name: Syntax name (see ``available_syntaxes()``).

    Returns:
        DescriptorParser for that syntax.

    Raises:
        ValueError: If the syntax is unknown.
    """
    syntax = SYNTAXES.get(name)
    if syntax is None:
        raise ValueError(
            f"Unknown address syntax: {name} (expected one of {', '.join(available_syntaxes())})"
        )
    logger.debug(f"Using {name} address syntax")
    return DescriptorParser(syntax=syntax)

"""Structured remote file addresses.

A RemoteDescriptor is the parsed form of an address such as
``/ssh:bob@build-01#2222|sudo:root@build-01:/etc/hosts``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

MAX_PORT = 65535


@dataclass(frozen=True)
class RemoteDescriptor:
    """Parsed remote (or elevated local) file address.

    Descriptors are never mutated. Use ``replace()`` to derive a new one.
    """

    method: str
    user: str = ""
    domain: str = ""
    host: str = "localhost"
    port: int | None = None
    local_path: str = ""
    hop_chain: str = ""

    def __post_init__(self) -> None:
        if not self.method:
            raise ValueError("Descriptor method must not be empty")
        if self.port is not None and not 0 < self.port <= MAX_PORT:
            raise ValueError(f"Invalid port: {self.port}")

    @property
    def is_multi_hop(self) -> bool:
        """Whether prior hops are needed before applying ``method``."""
        return bool(self.hop_chain)

    def replace(self, **changes) -> RemoteDescriptor:
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "method": self.method,
            "user": self.user,
            "domain": self.domain,
            "host": self.host,
            "port": self.port,
            "local_path": self.local_path,
            "hop_chain": self.hop_chain,
        }

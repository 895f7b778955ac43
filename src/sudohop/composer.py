"""Compose elevated file addresses.

Given a file name (local, remote or already multi-hop) and a target user,
PathComposer produces the address that opens the same file through the
privilege-elevation transport on the same host:

    /etc/hosts                    -> /sudo:root@localhost:/etc/hosts
    /ssh:bob@web#2222:/etc/hosts  -> /ssh:bob@web#2222|sudo:root@web#2222:/etc/hosts
    /scp:bob@web:/etc/hosts       -> /ssh:bob@web|sudo:root@web:/etc/hosts
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sudohop.descriptor import RemoteDescriptor
from sudohop.exceptions import InvalidUserError, UnresolvedPathError
from sudohop.hops import build_hop
from sudohop.parser import DescriptorParser
from sudohop.registry import TransportRegistry

if TYPE_CHECKING:
    from sudohop.config import SudoHopConfig

logger = logging.getLogger(__name__)

LOCAL_HOST = "localhost"


@dataclass
class PathComposer:
    """Rewrite file names so they are opened as another user.

    Stateless: results depend only on the arguments, the parser's syntax and
    the (read-only) registry.
    """

    parser: DescriptorParser = field(default_factory=DescriptorParser)
    registry: TransportRegistry = field(default_factory=TransportRegistry)

    def compose_descriptor(
        self, filename: str, target_user: str
    ) -> RemoteDescriptor | str:
        """Compute the elevated address of ``filename``.

        Args:
            filename: Local path or remote address.
            target_user: Account to open the file as.

        Returns:
            Descriptor of the elevated address, or a plain local path when the
            file is already addressed as ``target_user`` on the local machine.

        Raises:
            InvalidUserError: If ``target_user`` is empty or whitespace.
            UnresolvedPathError: If ``filename`` is empty.
            DescriptorParseError: If ``filename`` cannot be decomposed.
        """
        if not target_user or not target_user.strip():
            raise InvalidUserError(target_user)
        if not filename:
            raise UnresolvedPathError()

        current = self.parser.parse(filename)
        if current is None:
            local_path = os.path.abspath(os.path.expanduser(filename))
            logger.debug(f"Elevating local file {local_path} as {target_user}")
            return RemoteDescriptor(
                method=self.registry.elevation_method,
                user=target_user,
                host=LOCAL_HOST,
                local_path=local_path,
            )

        hop = build_hop(current, self.parser, self.registry)

        if target_user == current.user and self.registry.is_local_host(current.host):
            logger.debug(
                f"{filename} is already local as {target_user}, returning {current.local_path}"
            )
            return current.local_path

        logger.debug(f"Elevating {filename} as {target_user} via {hop}")
        return RemoteDescriptor(
            method=self.registry.elevation_method,
            user=target_user,
            domain=current.domain,
            host=current.host,
            port=current.port,
            local_path=current.local_path,
            hop_chain=hop,
        )

    def compose(self, filename: str, target_user: str) -> str:
        """Compute the elevated address of ``filename`` as a raw path.

        See ``compose_descriptor()`` for arguments and errors.
        """
        result = self.compose_descriptor(filename, target_user)
        if isinstance(result, str):
            return result
        return self.parser.serialize(result)


def compose(
    filename: str,
    target_user: str,
    parser: DescriptorParser | None = None,
    registry: TransportRegistry | None = None,
) -> str:
    """Compute the elevated address of ``filename`` with default collaborators."""
    composer = PathComposer(
        parser=parser or DescriptorParser(),
        registry=registry or TransportRegistry(),
    )
    return composer.compose(filename, target_user)


def elevate(
    filename: str,
    target_user: str | None = None,
    *,
    config: SudoHopConfig | None = None,
) -> str:
    """Elevate ``filename`` using configured defaults.

    Args:
        filename: Local path or remote address.
        target_user: Account to open the file as. Defaults to the configured
            default user.
        config: Configuration; loaded from sudohop.toml when None.

    Returns:
        Raw path to open.
    """
    from sudohop.config import load_config

    if config is None:
        config = load_config()
    if target_user is None:
        target_user = config.elevation.default_user
    return config.build_composer().compose(filename, target_user)

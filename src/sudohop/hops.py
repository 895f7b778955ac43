"""Build the hop fragment that reaches a host before the final transport."""

from __future__ import annotations

import logging

from sudohop.classifier import needs_downgrade
from sudohop.descriptor import RemoteDescriptor
from sudohop.parser import DescriptorParser
from sudohop.registry import TransportRegistry

logger = logging.getLogger(__name__)


def hop_method(descriptor: RemoteDescriptor, registry: TransportRegistry) -> str:
    """Get the method used to reach ``descriptor``'s host as a hop."""
    if needs_downgrade(descriptor.method, registry):
        logger.debug(
            f"Downgrading hop method {descriptor.method} to {registry.canonical_method}"
        )
        return registry.canonical_method
    return descriptor.method


def build_hop(
    descriptor: RemoteDescriptor,
    parser: DescriptorParser,
    registry: TransportRegistry,
) -> str:
    """Serialize "how to reach this host" as a hop fragment.

    The fragment keeps every earlier hop of ``descriptor`` and ends with the
    hop separator, so it can be used verbatim as the hop chain of a new
    descriptor on the same host.

    Args:
        descriptor: Current (pre-elevation) address of the file.
        parser: Parser for the address syntax in use.
        registry: Transport registry.

    Returns:
        Hop fragment, e.g. ``ssh:bob@build-01#2222|``.
    """
    intermediate = descriptor.replace(
        method=hop_method(descriptor, registry),
        local_path="",
    )
    serialized = parser.serialize(intermediate)
    fragment = parser.strip_suffix(parser.strip_prefix(serialized))
    return fragment + parser.hop_separator

"""sudohop - open files as another user through any transport chain."""

__version__ = "0.1.0"

from sudohop.classifier import needs_downgrade
from sudohop.composer import PathComposer, compose, elevate
from sudohop.descriptor import RemoteDescriptor
from sudohop.exceptions import (
    DescriptorParseError,
    InvalidUserError,
    SudoHopError,
    UnresolvedPathError,
)
from sudohop.hops import build_hop
from sudohop.parser import DescriptorParser, select_parser
from sudohop.registry import TransportMethod, TransportRegistry

__all__ = [
    "DescriptorParseError",
    "DescriptorParser",
    "InvalidUserError",
    "PathComposer",
    "RemoteDescriptor",
    "SudoHopError",
    "TransportMethod",
    "TransportRegistry",
    "UnresolvedPathError",
    "build_hop",
    "compose",
    "elevate",
    "needs_downgrade",
]

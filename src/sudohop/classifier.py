"""Decide which transports cannot serve as an intermediate hop."""

from __future__ import annotations

from sudohop.registry import TransportRegistry


def uses_ssh_copy(method: str, registry: TransportRegistry) -> bool:
    """Whether ``method`` copies out of band on top of a secure-shell login."""
    copy_program = registry.get_parameter(method, "copy_program")
    login_program = registry.get_parameter(method, "login_program")
    return bool(copy_program) and login_program == registry.canonical_login_program


def is_mount_style(method: str, registry: TransportRegistry) -> bool:
    """Whether ``method`` is served through a virtual filesystem mount."""
    return bool(registry.get_parameter(method, "mount_style"))


def needs_downgrade(method: str, registry: TransportRegistry) -> bool:
    """Whether ``method`` must be replaced by plain ssh when used as a hop.

    The elevation transport can only be chained after a method that gives
    direct shell access. Copy-based methods with an ssh login and mount-style
    methods do not, so the hop to their host is expressed as an ssh hop to the
    same user, host and port instead.

    Args:
        method: Transport method name.
        registry: Registry to look the method up in.

    Returns:
        True if the hop must use ``registry.canonical_method``.
    """
    return uses_ssh_copy(method, registry) or is_mount_style(method, registry)

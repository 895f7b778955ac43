"""sudohop configuration management.

Loads configuration from sudohop.toml with sensible defaults.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib as tomli  # Python 3.11+ stdlib
except ImportError:
    import tomli  # Backport for older Python

from sudohop.composer import PathComposer
from sudohop.parser import DescriptorParser, available_syntaxes, select_parser
from sudohop.registry import (
    DEFAULT_CANONICAL_LOGIN_PROGRAM,
    DEFAULT_CANONICAL_METHOD,
    DEFAULT_ELEVATION_METHOD,
    TransportRegistry,
    default_local_host_pattern,
)

CONFIG_FILENAME = "sudohop.toml"


@dataclass
class ElevationConfig:
    """Who to become and how."""

    default_user: str = "root"
    method: str = DEFAULT_ELEVATION_METHOD


@dataclass
class TransportConfig:
    """Transport layer settings."""

    canonical_method: str = DEFAULT_CANONICAL_METHOD
    canonical_login_program: str = DEFAULT_CANONICAL_LOGIN_PROGRAM
    local_host_pattern: str | None = None  # Built from the host name if unset


@dataclass
class SyntaxConfig:
    """Address syntax selection."""

    name: str = "default"


@dataclass
class SudoHopConfig:
    """Root configuration for sudohop."""

    elevation: ElevationConfig = field(default_factory=ElevationConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    syntax: SyntaxConfig = field(default_factory=SyntaxConfig)
    methods: dict[str, dict[str, Any]] = field(default_factory=dict)

    def build_registry(self) -> TransportRegistry:
        """Create the transport registry described by this configuration."""
        registry = TransportRegistry(
            canonical_method=self.transport.canonical_method,
            canonical_login_program=self.transport.canonical_login_program,
            elevation_method=self.elevation.method,
            local_host_pattern=(
                self.transport.local_host_pattern or default_local_host_pattern()
            ),
        )
        if self.methods:
            registry = registry.with_overrides(self.methods)
        return registry

    def build_parser(self) -> DescriptorParser:
        """Create the parser for the configured address syntax."""
        return select_parser(self.syntax.name)

    def build_composer(self) -> PathComposer:
        """Create a PathComposer wired to this configuration."""
        return PathComposer(parser=self.build_parser(), registry=self.build_registry())


def load_config(config_path: Path | None = None) -> SudoHopConfig:
    """Load configuration from sudohop.toml.

    Args:
        config_path: Path to config file. If None, searches current directory
                     and parent directories for sudohop.toml.

    Returns:
        SudoHopConfig with values from file or defaults.

    Raises:
        ValueError: If the file holds invalid values.
    """
    if config_path is None:
        config_path = _find_config_file()

    if config_path is None or not config_path.exists():
        return SudoHopConfig()

    with open(config_path, "rb") as f:
        data = tomli.load(f)

    return _parse_config(data)


def _find_config_file() -> Path | None:
    """Search for sudohop.toml in current and parent directories."""
    current = Path.cwd()

    for directory in [current, *current.parents]:
        config_file = directory / CONFIG_FILENAME
        if config_file.exists():
            return config_file

    return None


def _require_str(section: str, key: str, value: Any, allow_empty: bool = False) -> str:
    """Check that a config value is a (non-blank) string."""
    if not isinstance(value, str):
        raise ValueError(f"{section}.{key} must be a string, got {type(value).__name__}")
    if not allow_empty and not value.strip():
        raise ValueError(f"{section}.{key} must not be empty")
    return value


def _check_method_params(name: str, params: dict) -> None:
    """Check the value types of a [methods.<name>] table."""
    for key in ("login_program", "copy_program"):
        if key in params:
            _require_str(f"methods.{name}", key, params[key], allow_empty=True)
    if "mount_style" in params and not isinstance(params["mount_style"], bool):
        raise ValueError(f"methods.{name}.mount_style must be true or false")


def _parse_config(data: dict) -> SudoHopConfig:
    """Parse configuration dictionary into SudoHopConfig."""
    elevation_data = data.get("elevation", {})
    transport_data = data.get("transport", {})
    syntax_data = data.get("syntax", {})
    methods_data = data.get("methods", {})

    elevation_config = ElevationConfig(
        default_user=_require_str(
            "elevation", "default_user", elevation_data.get("default_user", "root")
        ),
        method=_require_str(
            "elevation", "method", elevation_data.get("method", DEFAULT_ELEVATION_METHOD)
        ),
    )

    local_host_pattern = transport_data.get("local_host_pattern")
    if local_host_pattern is not None:
        _require_str("transport", "local_host_pattern", local_host_pattern)
        try:
            re.compile(local_host_pattern)
        except re.error as e:
            raise ValueError(f"Invalid transport.local_host_pattern: {e}") from e

    transport_config = TransportConfig(
        canonical_method=_require_str(
            "transport",
            "canonical_method",
            transport_data.get("canonical_method", DEFAULT_CANONICAL_METHOD),
        ),
        canonical_login_program=_require_str(
            "transport",
            "canonical_login_program",
            transport_data.get("canonical_login_program", DEFAULT_CANONICAL_LOGIN_PROGRAM),
        ),
        local_host_pattern=local_host_pattern,
    )

    syntax_config = SyntaxConfig(
        name=_require_str("syntax", "name", syntax_data.get("name", "default"))
    )
    if syntax_config.name not in available_syntaxes():
        raise ValueError(
            f"Unknown syntax.name: {syntax_config.name} "
            f"(expected one of {', '.join(available_syntaxes())})"
        )

    if not isinstance(methods_data, dict) or not all(
        isinstance(params, dict) for params in methods_data.values()
    ):
        raise ValueError("methods must be a table of tables")
    for name, params in methods_data.items():
        _check_method_params(name, params)

    return SudoHopConfig(
        elevation=elevation_config,
        transport=transport_config,
        syntax=syntax_config,
        methods={name: dict(params) for name, params in methods_data.items()},
    )

"""Static transport method parameters.

The registry answers questions about transport methods (which login program a
method uses, whether it copies files out of band, whether it is backed by a
virtual filesystem mount) and decides which host names denote the local
machine. It never opens connections.
"""

from __future__ import annotations

import logging
import platform
import re
from dataclasses import dataclass, field, fields
from typing import Any

logger = logging.getLogger(__name__)


DEFAULT_CANONICAL_METHOD = "ssh"
DEFAULT_CANONICAL_LOGIN_PROGRAM = "ssh"
DEFAULT_ELEVATION_METHOD = "sudo"


@dataclass(frozen=True)
class TransportMethod:
    """Parameters of a single transport method."""

    name: str
    login_program: str | None = None
    copy_program: str | None = None
    mount_style: bool = False


# Built-in methods. Mount-style methods are served through a FUSE or GVFS
# mount and have no shell of their own.
BUILTIN_METHODS: tuple[TransportMethod, ...] = (
    TransportMethod("ssh", login_program="ssh"),
    TransportMethod("sshx", login_program="ssh"),
    TransportMethod("scp", login_program="ssh", copy_program="scp"),
    TransportMethod("scpx", login_program="ssh", copy_program="scp"),
    TransportMethod("rsync", login_program="ssh", copy_program="rsync"),
    TransportMethod("plink", login_program="plink"),
    TransportMethod("pscp", login_program="plink", copy_program="pscp"),
    TransportMethod("telnet", login_program="telnet"),
    TransportMethod("su", login_program="su"),
    TransportMethod("sudo", login_program="sudo"),
    TransportMethod("doas", login_program="doas"),
    TransportMethod("sg", login_program="sg"),
    TransportMethod("ksu", login_program="ksu"),
    TransportMethod("smb", copy_program="smbclient"),
    TransportMethod("adb", login_program="adb"),
    TransportMethod("docker", login_program="docker"),
    TransportMethod("kubernetes", login_program="kubectl"),
    TransportMethod("sftp", mount_style=True),
    TransportMethod("dav", mount_style=True),
    TransportMethod("davs", mount_style=True),
    TransportMethod("afp", mount_style=True),
    TransportMethod("gdrive", mount_style=True),
    TransportMethod("nextcloud", mount_style=True),
    TransportMethod("sshfs", login_program="ssh", mount_style=True),
    TransportMethod("rclone", mount_style=True),
)


def default_local_host_pattern() -> str:
    """Build the pattern matching host names that denote this machine."""
    names = ["localhost", "localhost4", "localhost6", "127.0.0.1", "::1"]
    node = platform.node()
    if node:
        names.append(node)
    return "^(" + "|".join(re.escape(name) for name in names) + ")$"


@dataclass
class TransportRegistry:
    """Read-only lookup of transport method parameters.

    Unknown methods and parameter names yield ``None`` rather than an error.
    """

    methods_table: dict[str, TransportMethod] = field(
        default_factory=lambda: {m.name: m for m in BUILTIN_METHODS}
    )
    canonical_method: str = DEFAULT_CANONICAL_METHOD
    canonical_login_program: str = DEFAULT_CANONICAL_LOGIN_PROGRAM
    elevation_method: str = DEFAULT_ELEVATION_METHOD
    local_host_pattern: str = field(default_factory=default_local_host_pattern)

    def __post_init__(self) -> None:
        # Host names are case-insensitive.
        try:
            self._local_host_re = re.compile(self.local_host_pattern, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"Invalid local host pattern: {e}") from e

    def get_parameter(self, method: str, name: str) -> Any | None:
        """Look up a static parameter of a transport method.

        Args:
            method: Transport method name.
            name: Parameter name (``login_program``, ``copy_program``,
                ``mount_style``).

        Returns:
            The parameter value, or None if the method or parameter is unknown.
        """
        entry = self.methods_table.get(method)
        if entry is None or name == "name":
            return None
        return getattr(entry, name, None)

    def is_local_host(self, host: str) -> bool:
        """Whether ``host`` is the local machine as the transports see it."""
        return bool(self._local_host_re.match(host))

    def methods(self) -> list[str]:
        """Get all known method names, sorted."""
        return sorted(self.methods_table)

    def with_overrides(
        self, overrides: dict[str, dict[str, Any]]
    ) -> TransportRegistry:
        """Return a registry with method parameters added or replaced.

        Args:
            overrides: Mapping of method name to parameter values. Parameters
                not given keep their built-in value.

        Returns:
            New TransportRegistry; this one is left untouched.

        Raises:
            ValueError: If an override names an unknown parameter or holds a
                value of the wrong type.
        """
        allowed = {f.name for f in fields(TransportMethod)} - {"name"}
        table = dict(self.methods_table)
        for name, params in overrides.items():
            unknown = set(params) - allowed
            if unknown:
                raise ValueError(
                    f"Unknown parameters for method {name}: {', '.join(sorted(unknown))}"
                )
            for key in ("login_program", "copy_program"):
                value = params.get(key)
                if value is not None and not isinstance(value, str):
                    raise ValueError(f"{key} of method {name} must be a string")
            if not isinstance(params.get("mount_style", False), bool):
                raise ValueError(f"mount_style of method {name} must be a boolean")
            base = table.get(name, TransportMethod(name))
            table[name] = TransportMethod(
                name=name,
                login_program=params.get("login_program", base.login_program),
                copy_program=params.get("copy_program", base.copy_program),
                mount_style=params.get("mount_style", base.mount_style),
            )
            logger.debug(f"Method {name} configured: {table[name]}")
        return TransportRegistry(
            methods_table=table,
            canonical_method=self.canonical_method,
            canonical_login_program=self.canonical_login_program,
            elevation_method=self.elevation_method,
            local_host_pattern=self.local_host_pattern,
        )

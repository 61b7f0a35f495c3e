"""Loading of the command shell's configuration file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from . import libconfig

__all__ = ["ConfigError", "RpcNode", "CmdConfig", "qualified_path", "load_config"]

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_DEFAULT_LOGLEVEL = 3


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded."""


@dataclass(frozen=True)
class RpcNode:
    """Address of one IPFS RPC node."""

    ipv4: str | None = None
    ipv6: str | None = None
    port: str | None = None


@dataclass
class CmdConfig:
    """Settings read from the configuration file."""

    persistent_location: str
    ipfs_rpc_nodes: list[RpcNode] = field(default_factory=list)
    loglevel: int = _DEFAULT_LOGLEVEL
    logfile: str | None = None
    uid: str | None = None


def qualified_path(path: str, ref: str | None = None) -> str:
    """Resolve *path* against the directory of *ref*, or the working directory."""
    if path.startswith("/"):
        return path
    if path.startswith("~"):
        return os.environ.get("HOME", "") + path[1:]
    if ref is not None:
        slash = ref.rfind("/")
        base = ref[:slash] if slash > 0 else ""
    else:
        base = os.getcwd()
    return f"{base}/{path}" if base else path


def _lookup_string(group: Mapping[str, Any], name: str) -> str | None:
    value = group.get(name)
    return value if isinstance(value, str) and value else None


def _lookup_int(group: Mapping[str, Any], name: str) -> int | None:
    value = group.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if _INT_MIN <= value <= _INT_MAX else None


def _rpc_node(entry: Any) -> RpcNode:
    settings: Mapping[str, Any] = entry if isinstance(entry, dict) else {}
    ipv4 = _lookup_string(settings, "ipv4")
    ipv6 = _lookup_string(settings, "ipv6")
    if ipv4 is None and ipv6 is None:
        raise ConfigError("Missing IPFS RPC node ip address.")
    port = _lookup_int(settings, "port")
    return RpcNode(ipv4=ipv4, ipv6=ipv6, port=str(port) if port else None)


def load_config(config_file: str) -> CmdConfig:
    """Read *config_file* and build the shell configuration."""
    try:
        settings = libconfig.load(config_file)
    except libconfig.ConfigSyntaxError as exc:
        raise ConfigError(str(exc)) from exc
    except OSError as exc:
        raise ConfigError(f"{config_file}: file I/O error") from exc

    loglevel = _lookup_int(settings, "loglevel")
    logfile = _lookup_string(settings, "logfile")

    location = _lookup_string(settings, "persistent_location")
    if location is None:
        raise ConfigError("Missing datadir option.")

    uid = _lookup_string(settings, "ipfs_uid")

    nodes = settings.get("ipfs_rpc_nodes")
    if not isinstance(nodes, list):
        raise ConfigError("Missing ipfs_rpc_nodes section.")
    if not nodes:
        raise ConfigError("Empty bootstraps option.")

    return CmdConfig(
        persistent_location=qualified_path(location, config_file),
        ipfs_rpc_nodes=[_rpc_node(entry) for entry in nodes],
        loglevel=_DEFAULT_LOGLEVEL if loglevel is None else loglevel,
        logfile=logfile,
        uid=uid,
    )
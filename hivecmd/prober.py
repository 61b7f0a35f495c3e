"""Connectivity checks for IPFS RPC nodes."""

from __future__ import annotations

import getopt
import http.client
import os
import sys
import urllib.error
import urllib.request
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import urlsplit

__all__ = ["DEFAULT_PORT", "version_urls", "probe", "read_nodes", "main"]

DEFAULT_PORT = 9095
DEFAULT_TIMEOUT = 5

OK = "ok."
UNREACHABLE = "unreachable."
INVALID_ADDRESS = "invalid node address."

_USAGE = (
    "prober, a utility detecting connectivity of IPFS nodes.\n"
    "Usage: prober [OPTION]... [NODE_IP[:NODE_PORT]] ...\n"
    "Description: prober tests connectivity of each IPFS nodes provided as command line"
    " arguments and nodes listed in the file specified by -f option. Node address takes"
    " the form NODE_IP[:NODE_PORT] where node port can be omitted to take the default"
    " port 9095.\n"
    "First run options:\n"
    "  -f, --file=FILE_PATH          File containing addresses of nodes to be tested."
    " Nodes are separated by whitespaces or newlines.\n"
    "\n"
    "Debugging options:\n"
    "      --debug                   Wait for debugger attach after start.\n"
    "\n"
)

# Never route probes through a proxy taken from the environment.
_OPENER = urllib.request.build_opener(urllib.request.ProxyHandler({}))


def _is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a malformed or out-of-range port
    except ValueError:
        return False
    return parts.scheme == "http" and bool(parts.hostname)


def version_urls(node: str) -> list[str]:
    """Return the valid version URLs for *node*, in the order they are tried.

    The default port is tried first; the address as given is the fallback
    for nodes that already carry a port.
    """
    candidates = (
        f"http://{node}:{DEFAULT_PORT}/version",
        f"http://{node}/version",
    )
    return [url for url in candidates if _is_valid_url(url)]


def _request_ok(url: str, timeout: float) -> bool:
    request = urllib.request.Request(url, data=b"", method="POST")
    try:
        with _OPENER.open(request, timeout=timeout) as response:
            return response.status == http.HTTPStatus.OK
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError):
        return False


def probe(node: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Check whether *node* answers its version endpoint and report the outcome.

    Prints ``probing NODE...`` followed by the outcome, and returns the
    outcome: ``"ok."``, ``"unreachable."`` or ``"invalid node address."``.
    """
    print(f"probing {node}...", end="", flush=True)
    urls = version_urls(node)
    if not urls:
        result = INVALID_ADDRESS
    elif _request_ok(urls[0], timeout):
        result = OK
    else:
        result = UNREACHABLE
    print(result, flush=True)
    return result


def read_nodes(path: str | os.PathLike[str]) -> list[str]:
    """Read node addresses separated by whitespace from the file at *path*."""
    return Path(path).read_text(encoding="utf-8", errors="replace").split()


def main(argv: Sequence[str] | None = None) -> int:
    """Probe the nodes named on the command line and in the node file."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        opts, nodes = getopt.gnu_getopt(args, "f:h?", ["file=", "debug", "help"])
    except getopt.GetoptError:
        sys.stdout.write(_USAGE)
        return -1

    node_file = ""
    wait_for_attach = False
    for opt, value in opts:
        if opt in ("-f", "--file"):
            node_file = value
        elif opt == "--debug":
            wait_for_attach = True
        else:
            sys.stdout.write(_USAGE)
            return -1

    if wait_for_attach:
        print(f"Wait for debugger attaching, process id is: {os.getpid()}.")
        print("After debugger attached, press any key to continue......")
        sys.stdin.readline()

    try:
        for node in nodes:
            probe(node)

        if not node_file:
            return 0

        try:
            file_nodes = read_nodes(node_file)
        except OSError:
            print(f"cannot open file ({node_file}).")
            return 0

        for node in file_nodes:
            probe(node)
    except KeyboardInterrupt:
        return -1
    return 0
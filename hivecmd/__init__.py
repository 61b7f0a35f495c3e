"""Interactive Hive drive shell and IPFS node connectivity prober."""

__version__ = "0.1.0"
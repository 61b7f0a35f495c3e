import os

import pytest

from hivecmd.config import CmdConfig, ConfigError, RpcNode, load_config, qualified_path


def _write(tmp_path, text, name="hive.conf"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


GOOD = """
loglevel = 5;
logfile = "hive.log";
persistent_location = "store";
ipfs_uid = "uid-1";
ipfs_rpc_nodes = (
    { ipv4 = "127.0.0.1"; port = 9095; },
    { ipv6 = "::1"; }
);
"""


def test_qualified_path_absolute():
    assert qualified_path("/var/hive", "/etc/hive/tests.conf") == "/var/hive"


def test_qualified_path_home(monkeypatch):
    monkeypatch.setenv("HOME", "/home/someone")
    assert qualified_path("~/data", None) == "/home/someone/data"


def test_qualified_path_relative_to_ref():
    assert qualified_path("data", "/etc/hive/tests.conf") == "/etc/hive/data"


def test_qualified_path_ref_without_directory():
    assert qualified_path("data", "tests.conf") == "data"
    assert qualified_path("data", "/tests.conf") == "data"


def test_qualified_path_relative_to_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert qualified_path("data", None) == os.getcwd() + "/data"


def test_load_full_config(tmp_path):
    path = _write(tmp_path, GOOD)
    config = load_config(path)
    assert config == CmdConfig(
        persistent_location=str(tmp_path) + "/store",
        ipfs_rpc_nodes=[
            RpcNode(ipv4="127.0.0.1", port="9095"),
            RpcNode(ipv6="::1"),
        ],
        loglevel=5,
        logfile="hive.log",
        uid="uid-1",
    )


def test_defaults(tmp_path):
    path = _write(
        tmp_path,
        'persistent_location = "/data/hive";\n'
        'ipfs_rpc_nodes = ( { ipv4 = "10.0.0.1"; port = 0; } );\n',
    )
    config = load_config(path)
    assert config.loglevel == 3
    assert config.logfile is None
    assert config.uid is None
    assert config.persistent_location == "/data/hive"
    assert config.ipfs_rpc_nodes == [RpcNode(ipv4="10.0.0.1")]


def test_wrongly_typed_options_are_ignored(tmp_path):
    path = _write(
        tmp_path,
        'loglevel = "loud"; logfile = ""; ipfs_uid = 7;\n'
        'persistent_location = "/data/hive";\n'
        'ipfs_rpc_nodes = ( { ipv4 = "10.0.0.1"; port = "80"; } );\n',
    )
    config = load_config(path)
    assert config.loglevel == 3
    assert config.logfile is None
    assert config.uid is None
    assert config.ipfs_rpc_nodes[0].port is None


def test_missing_persistent_location(tmp_path):
    path = _write(tmp_path, 'ipfs_rpc_nodes = ( { ipv4 = "10.0.0.1"; } );')
    with pytest.raises(ConfigError, match="Missing datadir option"):
        load_config(path)


def test_empty_persistent_location(tmp_path):
    path = _write(
        tmp_path,
        'persistent_location = ""; ipfs_rpc_nodes = ( { ipv4 = "10.0.0.1"; } );',
    )
    with pytest.raises(ConfigError, match="Missing datadir option"):
        load_config(path)


def test_missing_rpc_nodes(tmp_path):
    path = _write(tmp_path, 'persistent_location = "/data";')
    with pytest.raises(ConfigError, match="Missing ipfs_rpc_nodes section"):
        load_config(path)


def test_rpc_nodes_must_be_a_list(tmp_path):
    path = _write(
        tmp_path, 'persistent_location = "/data"; ipfs_rpc_nodes = [ "a" ];'
    )
    with pytest.raises(ConfigError, match="Missing ipfs_rpc_nodes section"):
        load_config(path)


def test_empty_rpc_nodes(tmp_path):
    path = _write(tmp_path, 'persistent_location = "/data"; ipfs_rpc_nodes = ();')
    with pytest.raises(ConfigError, match="Empty bootstraps option"):
        load_config(path)


def test_rpc_node_without_address(tmp_path):
    path = _write(
        tmp_path,
        'persistent_location = "/data"; ipfs_rpc_nodes = ( { port = 9095; } );',
    )
    with pytest.raises(ConfigError, match="Missing IPFS RPC node ip address"):
        load_config(path)


def test_syntax_error_names_file_and_line(tmp_path):
    path = _write(tmp_path, 'persistent_location = "/data";\nbroken = ;\n')
    with pytest.raises(ConfigError) as info:
        load_config(path)
    assert str(info.value).startswith(f"{path}:2 - ")


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="file I/O error"):
        load_config(str(tmp_path / "absent.conf"))
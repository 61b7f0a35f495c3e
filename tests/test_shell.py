import io
import os

import pytest

from hivecmd.config import CmdConfig, RpcNode
from hivecmd.session import HiveError, Session
from hivecmd.shell import Shell, main, read_commands, split_args

COMMAND_NAMES = [
    "help", "client_open", "client_close", "login", "logout", "client_info",
    "drive_info", "file_info", "ls", "mkdir", "mv", "cp", "rm", "fopen",
    "fclose", "fseek", "fread", "fwrite", "fcommit", "fdiscard", "exit",
]


class FakeDrive:
    def __init__(self):
        self.dirs = {"/": []}

    def mkdir(self, path):
        if path in self.dirs:
            raise HiveError("exists")
        self.dirs[path] = []
        parent = path.rsplit("/", 1)[0] or "/"
        self.dirs[parent].append(path.rsplit("/", 1)[1])

    def list_files(self, path):
        if path not in self.dirs:
            raise HiveError("no such directory")
        return [{"name": name, "type": "directory"} for name in self.dirs[path]]

    def close(self):
        pass


class FakeClient:
    def __init__(self):
        self.drive = FakeDrive()

    def login(self, open_url):
        pass

    def open_drive(self):
        return self.drive

    def close(self):
        pass


def make_shell(factory=None):
    out = io.StringIO()
    config = CmdConfig(
        persistent_location="/tmp/hive", ipfs_rpc_nodes=[RpcNode(ipv4="127.0.0.1")]
    )
    session = Session(config, factory or (lambda options: FakeClient()), out)
    return Shell(session, out), out


def test_split_args():
    assert split_args("  ls   /path ") == ["ls", "/path"]
    assert split_args("   ") == []


def test_read_commands_trims_and_prompts_on_empty_lines():
    prompts = []
    stream = io.StringIO("ls /\n\n  mkdir a  \r\nl\ts\npartial")
    lines = list(read_commands(stream, lambda: prompts.append(1)))
    assert lines == ["ls /", "mkdir a", "ls"]
    assert len(prompts) == 2


def test_help_lists_all_commands():
    shell, out = make_shell()
    shell.help([])
    expected = "available commands list:\n  " + " ".join(COMMAND_NAMES) + " \n"
    assert out.getvalue() == expected


def test_help_for_command_and_unknown():
    shell, out = make_shell()
    shell.help(["fseek"])
    shell.help(["bogus"])
    assert out.getvalue() == (
        "usage: fseek offset whence(set, cur, end)\n" "unknown command: bogus\n\n"
    )


def test_execute_unknown_command():
    shell, out = make_shell()
    shell.execute("frobnicate x")
    assert out.getvalue() == "unknown command: frobnicate\n"


def test_execute_reports_command_errors():
    shell, out = make_shell()
    shell.execute("ls")
    shell.execute("ls /")
    assert out.getvalue().splitlines() == [
        "Error: invalid command syntax.",
        "Error: ls failed. Reason: not login.",
    ]


def test_run_stops_at_exit():
    shell, out = make_shell()
    shell.run(["exit", "help"])
    assert shell.stopped is True
    assert out.getvalue() == "# "


def test_run_full_session():
    seen = []

    def factory(options):
        seen.append(options["drive_type"])
        return FakeClient()

    shell, out = make_shell(factory)
    shell.run(["client_open ipfs", "login", "mkdir /docs", "ls /", "exit", "ls /"])
    assert seen == ["ipfs"]
    assert "/docs" in shell.session.drive.dirs
    assert out.getvalue() == "# # # # name: docs\ntype: directory\n# "


def test_main_help_option(capsys):
    assert main(["-h"]) == -1
    assert "Usage: hivecmd [OPTION]..." in capsys.readouterr().out


def test_main_missing_config(tmp_path, capsys):
    path = tmp_path / "missing.conf"
    assert main(["-c", str(path)]) == -1
    assert f"config file ({path}) not exist." in capsys.readouterr().err


def test_main_bad_config(tmp_path, capsys):
    path = tmp_path / "bad.conf"
    path.write_text('loglevel = 3;\n')
    assert main(["-c", str(path)]) == -1
    assert "loading configure failed !" in capsys.readouterr().err


def test_main_runs_commands(tmp_path, capsys, monkeypatch):
    path = tmp_path / "hive.conf"
    path.write_text(
        'persistent_location = "data";\n'
        'ipfs_rpc_nodes = ( { ipv4 = "127.0.0.1"; port = 9095; } );\n'
    )
    monkeypatch.setattr("sys.stdin", io.StringIO("help ls\nclient_open ipfs\nexit\n"))
    assert main(["--config", str(path)]) == 0
    assert os.path.isdir(tmp_path / "data")
    output = capsys.readouterr().out
    assert "usage: ls path" in output
    assert "create hive client instance failure." in output


@pytest.mark.parametrize("option", ["-t", "-s"])
def test_main_rejects_other_options(option, capsys):
    assert main([option, "value"]) == -1
    assert "First run options:" in capsys.readouterr().out
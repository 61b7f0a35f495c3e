# hivecmd

A small command-line toolkit for working with Hive storage drives:

- `hivecmd` — an interactive shell that opens a client, logs in, and
  manipulates files and directories on the drive.
- `hive-prober` — checks whether IPFS RPC nodes answer on their
  `/version` endpoint.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Configuration

`hivecmd` reads a configuration file in libconfig syntax. By default it
looks for a file next to the program named `<program>.conf`; use
`-c/--config` to point at another one.

```
loglevel = 3;
logfile = "hivecmd.log";

# Relative paths are taken relative to the configuration file;
# a leading "~" expands to the home directory.
persistent_location = "data";

ipfs_uid = "uid-placeholder";

ipfs_rpc_nodes = (
    { ipv4 = "127.0.0.1"; port = 9095; },
    { ipv6 = "::1";       port = 9095; }
);
```

`persistent_location` and a non-empty `ipfs_rpc_nodes` list are required;
every node needs at least one of `ipv4` or `ipv6`. `loglevel` defaults
to 3. The persistent location directory is created on start if it does
not exist yet.

## The shell

```
hivecmd [-c CONFIG_FILE] [--debug]
```

Commands are read one per line after the `# ` prompt:

| Command | Purpose |
| --- | --- |
| `help [cmd]` | list commands, or show usage of one |
| `client_open type` | create a client (`onedrive` or `ipfs`) |
| `client_close` | close the open file, drive and client |
| `login` / `logout` | authorise the client and open its drive |
| `client_info` | show user id, display name, e-mail, phone, region |
| `drive_info` | show the drive id |
| `file_info path` | show file id, type and size |
| `ls path` | list a directory |
| `mkdir directory` | create a directory |
| `mv source target` | move a file |
| `cp source target` | copy a file |
| `rm path` | delete a file |
| `fopen path mode` | open a file (`r`, `w`, `a`, `r+`, `w+`, `a+`) |
| `fclose` | close the open file |
| `fseek offset whence` | seek; whence is `set`, `cur` or `end` |
| `fread size` | read up to `size` bytes and print them |
| `fwrite data` | write `data` to the open file |
| `fcommit` / `fdiscard` | commit or discard pending writes |
| `exit` | leave the shell |

Errors are reported in the shell as `Error: ... Reason: ...` lines and
do not end the session.

The shell can also be driven from Python: `hivecmd.config.load_config`
reads a configuration into a `CmdConfig`, a `hivecmd.session.Session`
wraps it together with a client factory, and `hivecmd.shell.Shell`
executes command lines against that session.

## The prober

```
hive-prober [-f FILE] [NODE_IP[:NODE_PORT] ...]
```

Each node given on the command line, and each whitespace-separated node
in `FILE`, is probed with a POST to `/version` with a five-second
timeout. When no port is given, port 9095 is used. One line is printed
per node: `ok.`, `unreachable.` or `invalid node address.`.
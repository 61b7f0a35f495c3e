[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hivecmd"
version = "0.1.0"
description = "Interactive shell for Hive storage drives and a connectivity prober for IPFS RPC nodes"
requires-python = ">=3.10"
dependencies = []
keywords = ["hive", "ipfs", "onedrive", "storage", "shell", "cli"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
hivecmd = "hivecmd.shell:main"
hive-prober = "hivecmd.prober:main"

[tool.hatch.build.targets.wheel]
packages = ["hivecmd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

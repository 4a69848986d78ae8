#!/usr/bin/env python3
# this_file: src/songsplitter/__main__.py
"""Make songsplitter package executable as a module."""

import sys

import fire

from songsplitter.songsplitter import cache, detect, export, split


def cli():
    commands = {
        "detect": detect,
        "split": split,
        "export": export,
        "cache": cache,
    }
    if len(sys.argv) >= 2 and sys.argv[1] not in commands and sys.argv[1] not in {"--help", "-h"}:
        fire.Fire(split)
    else:
        fire.Fire(commands)


if __name__ == "__main__":
    cli()

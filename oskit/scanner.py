"""Signature scanner for regular files in a directory."""

from __future__ import annotations

import os
import sys
from typing import Optional, Union

CHUNK_SIZE = 4096
SIGNATURE = b".test_virus_active"

Signature = Union[str, bytes]


def file_contains(path, signature: Signature = SIGNATURE) -> bool:
    """Whether the file holds the signature; unreadable files count as clean."""
    needle = signature.encode() if isinstance(signature, str) else bytes(signature)
    keep = len(needle) - 1
    tail = b""
    try:
        with open(path, "rb") as handle:
            while chunk := handle.read(CHUNK_SIZE):
                window = tail + chunk
                if needle in window:
                    return True
                tail = window[-keep:] if keep > 0 else b""
    except OSError:
        return False
    return False


def scan_directory(directory, signature: Signature = SIGNATURE) -> list[str]:
    """Return paths of regular files directly in the directory that hold the signature."""
    base = os.fspath(directory)
    infected = []
    with os.scandir(base) as entries:
        for entry in entries:
            if not entry.is_file(follow_symlinks=False):
                continue
            path = f"{base}/{entry.name}"
            if file_contains(path, signature):
                infected.append(path)
    return infected


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage: scanner <directory>", file=sys.stderr)
        return 1
    try:
        infected = scan_directory(args[0])
    except OSError as exc:
        print(f"opendir: {exc.strerror}", file=sys.stderr)
        return 1
    for path in infected:
        print(f"Warning: file {path} is infected!")
    return 0
# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: edits.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Line-based edits of tool-generated configuration files.
# -----------------------------------------------------------------------------
from typing import List, Optional, Tuple

from hostprov.errors import AnchorNotFound


def insert_after_anchor(
    text: str, anchor: str, block: str, marker: Optional[str] = None
) -> str:
    """
    Insert ``block`` after the first line equal to ``anchor`` (ignoring
    surrounding whitespace).

    If ``marker`` is already present the text is returned unchanged.
    Raises AnchorNotFound when no line matches.
    """
    if marker and marker in text:
        return text
    lines = text.splitlines(keepends=True)
    for i, line in enumerate(lines):
        if line.strip() == anchor.strip():
            if not line.endswith("\n"):
                lines[i] = line + "\n"
            insert = block if block.endswith("\n") else block + "\n"
            return "".join(lines[: i + 1]) + insert + "".join(lines[i + 1 :])
    raise AnchorNotFound(anchor)


def _block_end(lines: List[str], start: int) -> int:
    depth = 0
    for i in range(start, len(lines)):
        depth += lines[i].count("{") - lines[i].count("}")
        if depth <= 0:
            return i
    return len(lines) - 1


def delete_block(
    text: str, start: str, contains: Optional[str] = None
) -> Tuple[str, bool]:
    """
    Remove the first brace-delimited block opened by a line equal to
    ``start`` whose body contains ``contains``.

    Returns the new text and whether a block was removed. A missing block
    is not an error.
    """
    lines = text.splitlines(keepends=True)
    for i, line in enumerate(lines):
        if line.strip() != start.strip():
            continue
        end = _block_end(lines, i)
        body = "".join(lines[i : end + 1])
        if contains is not None and contains not in body:
            continue
        del lines[i : end + 1]
        # drop the blank line left behind
        if 0 < i < len(lines) and not lines[i].strip() and not lines[i - 1].strip():
            del lines[i]
        return "".join(lines), True
    return text, False

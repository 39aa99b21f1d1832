"""Deterministic clean-up of generated answers before they reach the user."""

from __future__ import annotations

import re

# Chat models often echo the trailing "Answer:" of the user prompt.
_ECHOED_LABEL_RE = re.compile(r"^\s*(?:\*\*)?answer(?:\*\*)?\s*:\s*", re.IGNORECASE)

_CHAR_MAP = {
    chr(0x2013): "-",
    chr(0x2014): "-",
    chr(0x2018): "'",
    chr(0x2019): "'",
    chr(0x201C): '"',
    chr(0x201D): '"',
}


def postprocess_answer(answer: str) -> str:
    text = (answer or "").strip()
    if not text:
        return text

    text = _ECHOED_LABEL_RE.sub("", text, count=1)
    for src, dst in _CHAR_MAP.items():
        text = text.replace(src, dst)

    lines = [re.sub(r"[ \t]+", " ", line).rstrip() for line in text.splitlines()]
    text = "\n".join(lines)
    return re.sub(r"\n{3,}", "\n\n", text).strip()

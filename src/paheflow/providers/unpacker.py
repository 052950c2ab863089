"""
Kwik packed-JS decoder ported to Python.

pahe.win and kwik pages hide their links inside a call of the form:
  eval(function(h,u,n,t,e,r){...}("<payload>",<n>,"<alphabet>",<offset>,<base>,<n>))

The payload is a list of numbers, one per output character. Each number is
written with the first ``base`` symbols of the alphabet as digits (most
significant first) and numbers are separated by ``alphabet[base]``.

This module reproduces the page's own decoding so we can regex out the links.
"""
from __future__ import annotations
import re
from typing import Optional

from .base import DecodeParameters
from .errors import MalformedPayload

BASE_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ+/"

_PACKED_ARGS_RE = re.compile(
    r'\(\s*"([^",]*)"\s*,\s*\d+\s*,\s*"([^",]*)"\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*\d+[a-zA-Z]?\s*\)'
)


def find_decode_parameters(text: str, pos: int = 0) -> tuple[Optional[DecodeParameters], int]:
    """Scan ``text`` from ``pos`` for the packed call arguments.

    Returns the parameters and the cursor past the literal, or (None, pos).
    """
    m = _PACKED_ARGS_RE.search(text, pos)
    if not m:
        return None, pos
    payload, alphabet, offset, base = m.groups()
    if not payload or not alphabet:
        return None, pos
    params = DecodeParameters(
        encoded_payload=payload,
        source_alphabet=alphabet,
        source_base=int(base),
        numeric_offset=int(offset),
    )
    return params, m.end()


def _convert(numeral: str, from_base: int, to_base: int) -> int:
    """Read ``numeral`` in ``from_base``, render in ``to_base``, parse as decimal."""
    from_digits = BASE_ALPHABET[:from_base]
    to_digits = BASE_ALPHABET[:to_base]

    value = 0
    for idx, ch in enumerate(reversed(numeral)):
        pos = from_digits.find(ch)
        if pos == -1:
            raise MalformedPayload(f"digit {ch!r} is not valid in base {from_base}")
        value += pos * from_base ** idx

    if value == 0:
        rendered = to_digits[0]
    else:
        rendered = ""
        while value > 0:
            rendered = to_digits[value % to_base] + rendered
            value //= to_base

    try:
        return int(rendered, 10)
    except ValueError:
        raise MalformedPayload(f"base {to_base} rendering {rendered!r} is not decimal") from None


def decode(
    payload: str,
    payload_alphabet_size: int,
    substitution_alphabet: str,
    offset: int,
    target_base: int = 10,
) -> str:
    """Decode a kwik payload back to the markup it hides."""
    if not 2 <= payload_alphabet_size <= len(BASE_ALPHABET):
        raise MalformedPayload(f"unsupported base {payload_alphabet_size}")
    if not 2 <= target_base <= len(BASE_ALPHABET):
        raise MalformedPayload(f"unsupported target base {target_base}")
    if len(substitution_alphabet) <= payload_alphabet_size:
        raise MalformedPayload(
            f"alphabet {substitution_alphabet!r} is too short for base {payload_alphabet_size}"
        )

    delimiter = substitution_alphabet[payload_alphabet_size]
    # first occurrence wins if a symbol is repeated
    index_of = {}
    for idx, ch in enumerate(substitution_alphabet):
        index_of.setdefault(ch, str(idx))

    runs = payload.split(delimiter)
    if payload.endswith(delimiter):
        runs.pop()
    if not runs:
        raise MalformedPayload("empty payload")

    out = []
    for run in runs:
        if not run:
            raise MalformedPayload("empty run in payload")
        try:
            numeral = "".join(index_of[ch] for ch in run)
        except KeyError as e:
            raise MalformedPayload(f"symbol {e.args[0]!r} is not in the alphabet") from None
        code = _convert(numeral, payload_alphabet_size, target_base) - offset
        if not 0 <= code <= 0x10FFFF:
            raise MalformedPayload(f"decoded code point {code} is out of range")
        out.append(chr(code))
    return "".join(out)


def decode_parameters(params: DecodeParameters) -> str:
    return decode(
        params.encoded_payload,
        params.source_base,
        params.source_alphabet,
        params.numeric_offset,
        params.target_base,
    )

#!/usr/bin/env python3
"""
Name: widthspec
Description: parse fold width specifications and build fold plans
License: perl

A width specification is a list of comma-separated tokens:

    80              one width
    3,-1,3,-1,2     several fields, negative widths are discarded
    6,-4,-1         a trailing negative width takes the rest of the line
    80,             a trailing empty token truncates after 80 columns
    1:5             a range, 1,2,3,4,5
    2:10:2          a range with a step
    1:10:3:2        take 2 numbers at every step, 1,2,4,5,7,8,10
    4{3}            repeat the expansion, 4,4,4
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

INTEGER_PATTERN = re.compile(r'^-?\d+$')
RANGE_PATTERN = re.compile(r'^(-?[\d:-]+)(?:\{(\d+)\})?$')
RANGE_ELEMENT_PATTERN = re.compile(r'^-?\d*$')

class FormatError(ValueError):
    """A width token that is neither empty, an integer nor a range."""

class RangeExpansionError(FormatError):
    """A range or repeat expression that cannot be expanded."""

class TokenKind(Enum):
    EMPTY = 0
    INTEGER = 1
    RANGE = 2
    MALFORMED = 3

@dataclass(frozen=True)
class WidthToken:
    kind: TokenKind
    text: str
    value: int = 0
    body: str = ''
    repeat: int = 1

def classify(text: str) -> WidthToken:
    """Tags a single comma-separated token with its kind."""
    if text == '':
        return WidthToken(TokenKind.EMPTY, text)
    if INTEGER_PATTERN.match(text):
        return WidthToken(TokenKind.INTEGER, text, value=int(text))
    match = RANGE_PATTERN.match(text)
    if match:
        body, repeat = match.groups()
        return WidthToken(TokenKind.RANGE, text, body=body,
                          repeat=int(repeat) if repeat is not None else 1)
    return WidthToken(TokenKind.MALFORMED, text)

def expand_range(body: str) -> List[int]:
    """
    Expands a 'start:end:step:length' number range.

    Every element may be omitted. start defaults to 1, end to start, and
    step to 1 or -1 depending on the direction. length is how many
    consecutive numbers are taken at every step. Bounds are inclusive.
    """
    fields = body.split(':')
    if len(fields) > 4:
        raise RangeExpansionError(f"{body}: too many range elements")
    for field in fields:
        if not RANGE_ELEMENT_PATTERN.match(field) or field == '-':
            raise RangeExpansionError(f"{body}: invalid range element '{field}'")

    values: List[Optional[int]] = [int(f) if f else None for f in fields]
    values += [None] * (4 - len(values))
    start, end, step, length = values

    if start is None:
        start = 1
    if end is None:
        end = start
    direction = -1 if end < start else 1

    if step is None:
        step = direction
    elif step == 0:
        raise RangeExpansionError(f"{body}: illegal step value of zero")
    elif end != start and (step > 0) != (direction > 0):
        raise RangeExpansionError(
            f"{body}: needs {'negative decrement' if direction < 0 else 'positive increment'}")

    if length is None:
        length = 1
    elif length < 1:
        raise RangeExpansionError(f"{body}: illegal length value '{length}'")

    numbers = []
    step_direction = 1 if step > 0 else -1
    for base in range(start, end + step_direction, step):
        for offset in range(length):
            n = base + offset * step_direction
            if (n - end) * step_direction > 0:
                break
            numbers.append(n)
    return numbers

def expand_token(token: WidthToken) -> List[int]:
    if token.kind is TokenKind.EMPTY:
        return [0]
    if token.kind is TokenKind.INTEGER:
        return [token.value]
    if token.kind is TokenKind.RANGE:
        return expand_range(token.body) * token.repeat
    raise FormatError(f"{token.text}: format error")

def parse_widths(raw_tokens: Iterable[str]) -> List[int]:
    """
    Flattens every width argument into one ordered list of integers.

    Each argument is split on commas; a trailing comma yields a trailing
    zero, so '80,' is [80, 0].
    """
    widths: List[int] = []
    for raw in raw_tokens:
        for text in raw.split(','):
            widths.extend(expand_token(classify(text)))
    return widths

def colrm_widths(columns: Iterable[int]) -> List[int]:
    """
    Converts colrm-style 'start end' column pairs into a width sequence.

    Columns are numbered from 1 and ranges are inclusive. A start without
    an end removes through the end of the line.
    """
    columns = list(columns)
    for col in columns:
        if col <= 0:
            raise ValueError(f"invalid column number '{col}'")

    widths: List[int] = []
    position = 1
    for i in range(0, len(columns), 2):
        start = columns[i]
        if start < position:
            raise ValueError(f"bad range: column {start} overlaps a previous range")
        if start > position:
            widths.append(start - position)

        if i + 1 >= len(columns):
            # Remove to the end of the line.
            widths.append(0)
            return widths

        end = columns[i + 1]
        if start > end:
            raise ValueError(f"bad range: {start},{end}")
        widths.append(-(end - start + 1))
        position = end + 1

    widths.append(-1)
    return widths

@dataclass(frozen=True)
class FoldPlan:
    """
    The widths handed to the folder for every line, and which of the
    resulting fragments are kept.

    keep is None in single-width mode, where every fragment is kept.
    """
    widths: Tuple[int, ...]
    keep: Optional[Tuple[bool, ...]] = None
    remainder: bool = False
    repeat: bool = False

    def select(self, fragments: Iterable[str]) -> List[str]:
        """Drops discarded fragments; fragments past the line's end are simply absent."""
        if self.keep is None:
            return list(fragments)
        return [frag for frag, keep in zip(fragments, self.keep) if keep]

def build_plan(seq: List[int], default_width: int) -> FoldPlan:
    if not seq:
        seq = [default_width]

    if len(seq) == 1:
        width = seq[0]
        if width < 0:
            # Whole line, no folding at all.
            return FoldPlan(widths=(0,), remainder=True)
        return FoldPlan(widths=(width,), repeat=True)

    widths = []
    keep = []
    for width in seq[:-1]:
        widths.append(abs(width))
        keep.append(width >= 0)

    last = seq[-1]
    remainder = last < 0
    widths.append(0 if remainder else last)
    keep.append(True)

    return FoldPlan(widths=tuple(widths), keep=tuple(keep), remainder=remainder)

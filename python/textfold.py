#!/usr/bin/env python3
"""
Name: textfold
Description: fold text by visual width, aware of escape sequences and wide characters
License: perl
"""

import re
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

from wcwidth import iter_sequences, wcswidth
from wcwidth.grapheme import iter_graphemes

SGR_PATTERN = re.compile(r'\x1b\[([\d;:]*)m')
SGR_RESET = '\x1b[m'

# Characters that must not start a line (closing punctuation, small kana).
LINE_HEAD_PROHIBITED = frozenset(
    ",.:;!?)]}"
    "、。，．・：；？！゛゜ヽヾゝゞ々ー’”）〕］｝〉》」』】〙〗〟｠»"
    "ァィゥェォッャュョヮヵヶぁぃぅぇぉっゃゅょゎゕゖ"
)
# Characters that must not end a line (opening brackets).
LINE_END_PROHIBITED = frozenset("([{‘“（〔［｛〈《「『【〘〖〝｟«")

class Unit(NamedTuple):
    """A piece of text that is never split: one grapheme cluster or one escape sequence."""
    text: str
    width: int
    sequence: bool

@dataclass(frozen=True)
class FoldOptions:
    boundary: str = 'none'      # 'none' or 'word'
    padding: bool = False
    padchar: str = ' '
    ambiguous: str = 'narrow'   # 'narrow' or 'wide'
    linebreak: str = 'none'     # 'none' or 'all'
    runin: int = 2
    runout: int = 2
    expand: bool = False
    tabstop: int = 8
    tabhead: str = ' '
    tabspace: str = ' '

def _is_word(unit: Unit) -> bool:
    char = unit.text[0]
    return unit.width == 1 and (char.isalnum() or char == '_')

def _update_sgr(active: Tuple[str, ...], seq: str) -> Tuple[str, ...]:
    """Returns the SGR state after applying an escape sequence."""
    match = SGR_PATTERN.fullmatch(seq)
    if not match:
        return active
    params = match.group(1).split(';')
    if params[0] in ('', '0'):
        # A reset, possibly followed by new attributes in the same sequence.
        return (seq,) if len(params) > 1 else ()
    return active + (seq,)

class Folder:
    """
    Cuts lines into fragments by visual width.

    Escape sequences take no columns, East Asian wide characters take two,
    and a grapheme cluster (a base with its combining marks, an emoji ZWJ
    sequence, a flag pair) is never split. Colours that are active at a
    cut are closed at the end of the fragment and opened again at the
    start of the next one.
    """

    def __init__(self, options: Optional[FoldOptions] = None):
        self.options = options or FoldOptions()
        self._ambiguous_width = 2 if self.options.ambiguous == 'wide' else 1

    def grapheme_width(self, grapheme: str) -> int:
        # Control characters report -1; they occupy no columns here.
        return max(wcswidth(grapheme, ambiguous_width=self._ambiguous_width), 0)

    def units(self, text: str) -> List[Unit]:
        units: List[Unit] = []
        for segment, is_sequence in iter_sequences(text):
            if is_sequence:
                units.append(Unit(segment, 0, True))
                continue
            for grapheme in iter_graphemes(segment):
                units.append(Unit(grapheme, self.grapheme_width(grapheme), False))
        return units

    def width(self, text: str) -> int:
        """Visual width of text in columns."""
        return sum(unit.width for unit in self.units(text))

    def expand_tabs(self, text: str) -> str:
        """Replaces tabs with tabhead followed by tabspace up to the next tab stop."""
        opts = self.options
        out = []
        col = 0
        for segment, is_sequence in iter_sequences(text):
            if is_sequence:
                out.append(segment)
                continue
            for grapheme in iter_graphemes(segment):
                if grapheme == '\t':
                    spaces = opts.tabstop - (col % opts.tabstop)
                    out.append(opts.tabhead + opts.tabspace * (spaces - 1))
                    col += spaces
                else:
                    out.append(grapheme)
                    col += self.grapheme_width(grapheme)
        return ''.join(out)

    def _cut(self, units: Sequence[Unit], start: int, width: int) -> int:
        """Returns the index where a fragment of at most width columns starting at start ends."""
        if width <= 0:
            return start

        n = len(units)
        col = 0
        i = start
        while i < n and col + units[i].width <= width:
            col += units[i].width
            i += 1

        if i == n:
            return i

        if col == 0:
            # A glyph wider than the field still has to go somewhere.
            i += 1
            while i < n and units[i].width == 0:
                i += 1
            return i

        if self.options.boundary == 'word':
            i = self._word_boundary(units, start, i)

        if self.options.linebreak == 'all':
            i = self._linebreak(units, start, i)

        return i

    def _word_boundary(self, units: Sequence[Unit], start: int, end: int) -> int:
        """Moves a cut that splits a word back to the preceding break."""
        visible = [j for j in range(start, end) if not units[j].sequence]
        following = next((u for u in units[end:] if not u.sequence), None)
        if not visible or following is None:
            return end
        if not (_is_word(units[visible[-1]]) and _is_word(following)):
            return end

        for k in range(len(visible) - 1, 0, -1):
            before, after = units[visible[k - 1]], units[visible[k]]
            if not (_is_word(before) and _is_word(after)):
                return visible[k]
        return end

    def _linebreak(self, units: Sequence[Unit], start: int, end: int) -> int:
        """Applies run-in of line-head characters, or else run-out of line-end characters."""
        opts = self.options
        n = len(units)

        i = end
        extra = 0
        while i < n:
            unit = units[i]
            if unit.sequence:
                i += 1
                continue
            if unit.text[0] not in LINE_HEAD_PROHIBITED or extra + unit.width > opts.runin:
                break
            extra += unit.width
            i += 1
            end = i
        if extra:
            return end

        pushed = 0
        i = end
        while i > start + 1:
            unit = units[i - 1]
            if unit.sequence:
                i -= 1
                continue
            if unit.text[0] not in LINE_END_PROHIBITED or pushed + unit.width > opts.runout:
                break
            pushed += unit.width
            i -= 1
            end = i
        return end

    def _render(self, units: Sequence[Unit], start: int, end: int,
                active: Tuple[str, ...]) -> Tuple[str, int, Tuple[str, ...]]:
        """Joins units[start:end], carrying the colour state across the cut."""
        parts = list(active)
        col = 0
        for unit in units[start:end]:
            parts.append(unit.text)
            col += unit.width
            if unit.sequence:
                active = _update_sgr(active, unit.text)
        if active and end < len(units):
            parts.append(SGR_RESET)
        return ''.join(parts), col, active

    def _pad(self, fragment: str, col: int, width: int) -> str:
        if self.options.padding and col < width:
            return fragment + self.options.padchar * (width - col)
        return fragment

    def fold(self, line: str, widths: Sequence[int], remainder: bool = False,
             repeat: bool = False) -> List[str]:
        """
        Folds a line into fragments.

        With repeat, widths[0] is applied again and again until the line
        is used up; an empty line still yields one empty fragment.
        Otherwise there is one fragment per width for as long as text
        remains. A final zero width yields nothing unless remainder is
        set, in which case the final fragment is everything left over.
        """
        if self.options.expand:
            line = self.expand_tabs(line)
        units = self.units(line)
        fragments: List[str] = []
        active: Tuple[str, ...] = ()
        pos = 0

        if repeat:
            width = widths[0]
            if width == 0 or not units:
                return ['']
            while pos < len(units):
                end = self._cut(units, pos, width)
                fragment, col, active = self._render(units, pos, end, active)
                fragments.append(self._pad(fragment, col, width))
                pos = end
            return fragments

        last = len(widths) - 1
        for index, width in enumerate(widths):
            if pos >= len(units):
                break
            if index == last:
                if remainder:
                    fragment, _, active = self._render(units, pos, len(units), active)
                    fragments.append(fragment)
                    break
                if width == 0:
                    break
            end = self._cut(units, pos, width)
            fragment, col, active = self._render(units, pos, end, active)
            fragments.append(self._pad(fragment, col, width))
            pos = end
        return fragments

"""Tests for the visual-width folder."""
import pytest

from textfold import SGR_RESET, Folder, FoldOptions

RED = '\x1b[31m'
FAMILY = '\U0001F468\u200d\U0001F469\u200d\U0001F467'
FLAG_JP = '\U0001F1EF\U0001F1F5'
HEART_VS16 = '\u2764\ufe0f'


def fold(line, widths, **kwargs):
    options = kwargs.pop('options', None)
    return Folder(options).fold(line, widths, **kwargs)


class TestWidth:

    @pytest.mark.parametrize('text,expected', [
        ('', 0),
        ('abc', 3),
        ('中文', 4),
        ('e\u0301', 1),
        (f'{RED}red{SGR_RESET}', 3),
        ('a\x07b', 2),
    ])
    def test_width(self, text, expected):
        assert Folder().width(text) == expected

    def test_ambiguous_wide(self):
        # U+00B1 PLUS-MINUS SIGN is East Asian ambiguous.
        assert Folder().width('±') == 1
        assert Folder(FoldOptions(ambiguous='wide')).width('±') == 2


class TestRepeat:

    def test_cuts_whole_line(self):
        assert fold('abcdefgh', [3], repeat=True) == ['abc', 'def', 'gh']

    def test_short_line_passes_through(self):
        assert fold('abc', [10], repeat=True) == ['abc']

    def test_empty_line(self):
        assert fold('', [10], repeat=True) == ['']

    def test_zero_width_truncates(self):
        assert fold('abcdef', [0], repeat=True) == ['']

    def test_fragments_never_exceed_width(self):
        folder = Folder()
        line = 'The quick 茶色の fox jumps over the 怠惰な dog'
        for fragment in folder.fold(line, [5], repeat=True):
            assert folder.width(fragment) <= 5
        assert ''.join(folder.fold(line, [5], repeat=True)) == line

    def test_wide_characters(self):
        assert fold('中文字', [3], repeat=True) == ['中', '文', '字']
        assert fold('中文字', [4], repeat=True) == ['中文', '字']

    def test_wide_character_in_narrow_field(self):
        assert fold('中a', [1], repeat=True) == ['中', 'a']

    def test_combining_mark_stays_with_base(self):
        assert fold('ae\u0301b', [2], repeat=True) == ['ae\u0301', 'b']


class TestGraphemes:

    @pytest.mark.parametrize('text,expected', [
        (FAMILY, 2),
        (FLAG_JP, 2),
        (HEART_VS16, 2),
        (FAMILY + 'ab', 4),
    ])
    def test_width(self, text, expected):
        assert Folder().width(text) == expected

    def test_zwj_sequence_is_not_split(self):
        assert fold(FAMILY + 'ab', [2], repeat=True) == [FAMILY, 'ab']

    def test_flag_pair_is_not_split(self):
        assert fold('a' + FLAG_JP + FLAG_JP, [3], repeat=True) == ['a' + FLAG_JP, FLAG_JP]

    def test_vs16_in_fields(self):
        assert fold(HEART_VS16 + 'abc', [2, 0], remainder=True) == [HEART_VS16, 'abc']

    def test_expand_tabs_after_emoji(self):
        options = FoldOptions(expand=True, tabstop=4)
        assert fold(FAMILY + '\tx', [0], remainder=True, options=options) == [FAMILY + '  x']


class TestFields:

    def test_one_fragment_per_width(self):
        assert fold('Wed Dec 19 14:00:00', [3, 1, 3, 1, 2]) == ['Wed', ' ', 'Dec', ' ', '19']

    def test_missing_fragments_are_absent(self):
        assert fold('Wed', [3, 1, 3]) == ['Wed']

    def test_empty_line_has_no_fragments(self):
        assert fold('', [3, 1, 3]) == []

    def test_inner_zero_yields_empty_field(self):
        assert fold('abcdef', [3, 0, 2]) == ['abc', '', 'de']

    def test_trailing_zero_yields_nothing(self):
        assert fold('abcdef', [3, 0]) == ['abc']

    def test_remainder(self):
        assert fold('Wed Dec 19 14:00:00', [6, 4, 0], remainder=True) == \
            ['Wed De', 'c 19', ' 14:00:00']

    def test_remainder_alone_is_whole_line(self):
        assert fold('a\tb c', [0], remainder=True) == ['a\tb c']

    def test_remainder_after_exhausted_line(self):
        assert fold('abc', [3, 2, 0], remainder=True) == ['abc']


class TestSequences:

    def test_sequences_have_no_width(self):
        assert fold(f'{RED}abc{SGR_RESET}def', [3, 0], remainder=True) == \
            [f'{RED}abc{SGR_RESET}', 'def']

    def test_colour_is_carried_across_cut(self):
        line = f'{RED}abcdef{SGR_RESET}'
        assert fold(line, [3], repeat=True) == \
            [f'{RED}abc{SGR_RESET}', f'{RED}def{SGR_RESET}']

    def test_colour_carried_through_discarded_field(self):
        line = f'{RED}abcdefghi{SGR_RESET}'
        fragments = fold(line, [3, 3, 3])
        assert fragments[2] == f'{RED}ghi{SGR_RESET}'


class TestOptions:

    def test_padding(self):
        options = FoldOptions(padding=True)
        assert fold('abcde', [3], repeat=True, options=options) == ['abc', 'de ']

    def test_padchar(self):
        options = FoldOptions(padding=True, padchar='.')
        assert fold('ab', [3, 4], options=options) == ['ab.']

    def test_remainder_is_not_padded(self):
        options = FoldOptions(padding=True)
        assert fold('abcd', [2, 0], remainder=True, options=options) == ['ab', 'cd']

    def test_word_boundary(self):
        options = FoldOptions(boundary='word')
        assert fold('hello world', [8], repeat=True, options=options) == ['hello ', 'world']

    def test_word_boundary_long_word(self):
        options = FoldOptions(boundary='word')
        assert fold('abcdefgh', [3], repeat=True, options=options) == ['abc', 'def', 'gh']

    def test_word_boundary_at_space(self):
        options = FoldOptions(boundary='word')
        assert fold('abc def', [3], repeat=True, options=options) == ['abc', ' ', 'def']

    def test_linebreak_runin(self):
        options = FoldOptions(linebreak='all')
        assert fold('あいう。えお', [6], repeat=True, options=options) == ['あいう。', 'えお']

    def test_linebreak_runin_limit(self):
        options = FoldOptions(linebreak='all', runin=1)
        assert fold('あいう。えお', [6], repeat=True, options=options) == ['あいう', '。えお']

    def test_linebreak_runout(self):
        options = FoldOptions(linebreak='all')
        assert fold('あい「うえ」', [6], repeat=True, options=options) == ['あい', '「うえ」']

    def test_expand_tabs(self):
        options = FoldOptions(expand=True)
        assert fold('a\tb', [0], remainder=True, options=options) == ['a       b']

    def test_expand_tabs_custom(self):
        options = FoldOptions(expand=True, tabstop=4, tabhead='>', tabspace='-')
        assert fold('ab\tc', [0], remainder=True, options=options) == ['ab>-c']

    def test_expand_tabs_counts_visual_width(self):
        options = FoldOptions(expand=True, tabstop=4)
        assert fold(f'{RED}中\tx', [0], remainder=True, options=options) == [f'{RED}中  x']

    def test_expand_before_fold(self):
        options = FoldOptions(expand=True, tabstop=4)
        assert fold('\tab', [3], repeat=True, options=options) == ['   ', ' ab']

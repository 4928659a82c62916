#!/usr/bin/env python3
"""
Name: ansifold
Description: fold or cut lines into fields by visual width, escape sequence aware
Author: Kazumasa Utashiro (Original Perl Author)
License: perl
"""

import sys
import os
import argparse
import re
import fileinput
from dataclasses import dataclass
from typing import Optional, Tuple

from wcwidth import wcswidth

from textfold import Folder, FoldOptions
from widthspec import FoldPlan, build_plan, colrm_widths, parse_widths

__version__ = "1.0"

DEFAULT_WIDTH = 72
EXPAND_DEFAULT_WIDTH = -1

TERMINATOR_PATTERN = re.compile(r'\r?\n\Z')

def preprocess_argv(args_list: list) -> list:
    """
    Attaches the value of '-w'/'--width' to the option itself.

    Width lists often start with a negative number ('-w -1,3'), which
    argparse would otherwise take for an option.
    """
    processed_args = []
    args = iter(args_list)
    for arg in args:
        if arg == '--':
            processed_args.append(arg)
            processed_args.extend(args)
            break
        if arg in ('-w', '--width'):
            value = next(args, None)
            if value is None:
                processed_args.append(arg)
            else:
                processed_args.append(f'--width={value}')
        else:
            processed_args.append(arg)
    return processed_args

def unescape_separator(text: str) -> str:
    """Interprets '\\n' as a newline and '\\\\' as a backslash; anything else is left alone."""
    return re.sub(r'\\([n\\])', lambda m: '\n' if m.group(1) == 'n' else '\\', text)

def single_column_char(text: str) -> str:
    """argparse type for options that take one narrow character."""
    if wcswidth(text) != 1:
        raise argparse.ArgumentTypeError(f"'{text}' is not a single-column character")
    return text

def positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"illegal value '{text}', must be positive")
    return value

def non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"illegal value '{text}', must not be negative")
    return value

@dataclass(frozen=True)
class FoldConfig:
    """Everything the line folder needs, fixed before the first line is read."""
    plan: FoldPlan
    separator: str = '\n'
    paragraph: int = 0
    options: FoldOptions = FoldOptions()
    files: Tuple[str, ...] = ()

class LineFolder:
    """Folds every line with the same plan and writes the joined fields."""

    def __init__(self, config: FoldConfig):
        self.config = config
        self.folder = Folder(config.options)

    def fold_line(self, text: str) -> str:
        """Folds a line without its terminator and joins the kept fields."""
        plan = self.config.plan
        fragments = self.folder.fold(text, plan.widths,
                                     remainder=plan.remainder, repeat=plan.repeat)
        return self.config.separator.join(plan.select(fragments))

    def process_line(self, line: str) -> str:
        match = TERMINATOR_PATTERN.search(line)
        terminator = match.group(0) if match else ''
        text = line[:match.start()] if match else line

        output = self.fold_line(text) + terminator
        if self.config.paragraph:
            output += (terminator or '\n') * self.config.paragraph
        return output

    def process_stream(self, stream, out=None):
        """Processes an entire input stream line by line."""
        out = out or sys.stdout
        for line in stream:
            out.write(self.process_line(line))

def build_parser(expand_mode: bool = False) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ansiexpand' if expand_mode else None,
        description="Fold or cut lines into fields of the given visual widths.",
        usage="%(prog)s [-nsx] [-p] [-w width[,width...]] [--colrm start [end ...]] [file ...]"
    )
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')

    # --- Fields ---
    field_group = parser.add_mutually_exclusive_group()
    field_group.add_argument(
        '-w', '--width',
        action='append',
        metavar='SPEC',
        help='Comma-separated field widths; may be repeated (default: '
             f'{EXPAND_DEFAULT_WIDTH if expand_mode else DEFAULT_WIDTH}).'
    )
    field_group.add_argument(
        '--colrm',
        nargs='+',
        type=positive_int,
        metavar='COL',
        help='Remove columns like colrm(1): start [end [start [end ...]]].'
    )

    # --- Output ---
    parser.add_argument(
        '-n',
        dest='separate',
        action='store_const',
        const='',
        help="Join fields with nothing; same as --separate ''."
    )
    parser.add_argument(
        '--separate',
        dest='separate',
        metavar='STRING',
        help='Join fields with STRING; \\n and \\\\ are recognized (default: newline).'
    )
    parser.add_argument(
        '-p', '--paragraph',
        action='count',
        default=0,
        help='Print an empty line after each line; repeat for more.'
    )

    # --- Folding ---
    parser.add_argument('--boundary', choices=('none', 'word'), default='none',
                        help='Avoid cutting in the middle of a word.')
    parser.add_argument('--padding', action='store_true',
                        help='Pad fields to their width.')
    parser.add_argument('--padchar', type=single_column_char, default=' ',
                        help='Character used for padding (default: space).')
    parser.add_argument('--ambiguous', choices=('narrow', 'wide'), default='narrow',
                        help='Width of East Asian ambiguous characters.')
    parser.add_argument('--linebreak', choices=('none', 'all'), default='none',
                        help='Apply line-break rules for closing and opening punctuation.')
    parser.add_argument('--runin', type=non_negative_int, default=2,
                        help='Columns a field may grow to take in closing punctuation.')
    parser.add_argument('--runout', type=non_negative_int, default=2,
                        help='Columns a field may shrink to push out opening punctuation.')
    parser.add_argument('-s', '--smart', action='store_true',
                        help='Same as --boundary=word --linebreak=all.')

    # --- Tabs ---
    parser.add_argument('-x', '--expand', action='store_true', default=expand_mode,
                        help='Expand tabs before folding.')
    parser.add_argument('--tabstop', type=positive_int, default=8,
                        help='Tab width (default: 8).')
    parser.add_argument('--tabhead', type=single_column_char, default=' ',
                        help='Character for the first column of an expanded tab.')
    parser.add_argument('--tabspace', type=single_column_char, default=' ',
                        help='Character for the rest of an expanded tab.')

    parser.add_argument('files', nargs='*',
                        help='Files to process. Reads from stdin if none are given.')
    return parser

def build_config(args: argparse.Namespace, expand_mode: bool = False) -> FoldConfig:
    """
    Turns parsed arguments into an immutable configuration.

    Raises FormatError (a ValueError) for a malformed width list and
    ValueError for bad --colrm columns.
    """
    separator: Optional[str] = args.separate
    if args.colrm:
        seq = colrm_widths(args.colrm)
        if separator is None:
            separator = ''
    else:
        seq = parse_widths(args.width or [])
    separator = '\n' if separator is None else unescape_separator(separator)

    default_width = EXPAND_DEFAULT_WIDTH if expand_mode else DEFAULT_WIDTH
    options = FoldOptions(
        boundary='word' if args.smart else args.boundary,
        padding=args.padding,
        padchar=args.padchar,
        ambiguous=args.ambiguous,
        linebreak='all' if args.smart else args.linebreak,
        runin=args.runin,
        runout=args.runout,
        expand=args.expand,
        tabstop=args.tabstop,
        tabhead=args.tabhead,
        tabspace=args.tabspace,
    )
    return FoldConfig(
        plan=build_plan(seq, default_width),
        separator=separator,
        paragraph=args.paragraph,
        options=options,
        files=tuple(args.files),
    )

def main(argv=None, expand_mode=None):
    """Parses arguments and runs the line-folding logic."""
    if expand_mode is None:
        expand_mode = os.path.basename(sys.argv[0]).startswith('ansiexpand')

    parser = build_parser(expand_mode)
    args = parser.parse_args(preprocess_argv(sys.argv[1:] if argv is None else argv))

    # Width errors are fatal before any input is read.
    try:
        config = build_config(args, expand_mode)
    except ValueError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        sys.exit(1)

    line_folder = LineFolder(config)

    # Bytes that are not UTF-8 pass through unchanged instead of aborting the run.
    for stream in (sys.stdin, sys.stdout):
        if hasattr(stream, 'reconfigure'):
            stream.reconfigure(errors='surrogateescape')

    # --- Process Input ---
    exit_status = 0
    try:
        with fileinput.input(files=config.files or ('-',),
                             openhook=fileinput.hook_encoded('utf-8', 'surrogateescape')) as f:
            line_folder.process_stream(f)
    except FileNotFoundError as e:
        print(f"{parser.prog}: '{e.filename}': {e.strerror}", file=sys.stderr)
        exit_status = 1
    except IsADirectoryError as e:
        print(f"{parser.prog}: '{e.filename}': is a directory", file=sys.stderr)
        exit_status = 1
    except (BrokenPipeError, KeyboardInterrupt):
        sys.stderr.close()
        exit_status = 1

    sys.exit(exit_status)

def expand_main(argv=None):
    """Entry point for ansiexpand: no folding by default, tabs expanded."""
    main(argv, expand_mode=True)

if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
gibberkit CLI
=============
Command-line interface for training, exclusion and word generation.

Flags are carried out left to right, each at its position on the command
line, so settings must come before the -c that uses them and -f writes
whatever has been generated so far:

    gibberkit -t french.txt -x words.txt -n 6 -m 8 -c 100 -f out.txt

Recoverable problems (unreadable files, missing flag values, settings that
can never produce enough words) are reported on stderr and the run goes on.
The exit status is 0 for all of them.
"""

import argparse
import logging
import re
import sys
from dataclasses import dataclass
from typing import Optional

from gibberkit import GibberKit, __version__
from gibberkit.errors import (
    DegenerateGenerationError,
    FileOpenError,
    MissingArgumentError,
    OutOfMemoryError,
    RulesFormatError,
)
from gibberkit.settings import get_setting

logger = logging.getLogger(__name__)

DEFAULT_COUNT = get_setting("generation.count", 8192)
DEFAULT_MIN_LENGTH = get_setting("generation.min_length", 6)
DEFAULT_MAX_LENGTH = get_setting("generation.max_length", 8)
LOG_FORMAT = get_setting("logging.format", "%(levelname)s %(name)s: %(message)s")


# =============================================================================
# Utilities
# =============================================================================

class Output:
    """Generated-word and fatal-error output."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def error(self, msg: str):
        print(f"Error: {msg}", file=sys.stderr)

    def words(self, kit: GibberKit) -> int:
        return kit.write_output(self.stream)


def parse_int(value: str) -> int:
    """Leading integer of value, or 0 if there is none."""
    match = re.match(r'\s*([-+]?\d+)', value)
    return int(match.group(1)) if match else 0


@dataclass
class RunState:
    """Settings accumulated while walking the command line."""
    min_length: int = DEFAULT_MIN_LENGTH
    max_length: int = DEFAULT_MAX_LENGTH
    count: int = DEFAULT_COUNT
    output_path: Optional[str] = None


class StepAction(argparse.Action):
    """Record (step, value, flag) in command-line order instead of storing."""

    def __call__(self, parser, namespace, values, option_string=None):
        steps = list(getattr(namespace, 'steps', None) or [])
        steps.append((self.dest, values, option_string))
        namespace.steps = steps


class GibberParser(argparse.ArgumentParser):
    """Prints usage on bad input and exits with status 0."""

    def error(self, message):
        self.print_help(sys.stderr)
        self.exit(0, f"\n{self.prog}: {message}\n")


# =============================================================================
# Steps
# =============================================================================

def _require(value, flag: str):
    if value is None:
        raise MissingArgumentError(flag)
    return value


def step_train(kit: GibberKit, state: RunState, value, flag):
    """Scan text file, create char usage rules."""
    kit.train(_require(value, flag))


def step_exclude(kit: GibberKit, state: RunState, value, flag):
    """Add words from this file to dictionary of excluded words."""
    kit.exclude(_require(value, flag))


def step_save_training(kit: GibberKit, state: RunState, value, flag):
    kit.save_training(_require(value, flag))


def step_save_exclusions(kit: GibberKit, state: RunState, value, flag):
    kit.save_exclusions(_require(value, flag))


def step_min_length(kit: GibberKit, state: RunState, value, flag):
    state.min_length = parse_int(_require(value, flag))
    if state.min_length < 1:
        logger.warning(f"Invalid minimum length {value!r}, using {DEFAULT_MIN_LENGTH}")
        state.min_length = DEFAULT_MIN_LENGTH


def step_max_length(kit: GibberKit, state: RunState, value, flag):
    state.max_length = parse_int(_require(value, flag))
    if state.max_length < state.min_length:
        logger.warning(
            f"Maximum length {value!r} is below minimum {state.min_length}, "
            f"using {DEFAULT_MAX_LENGTH}"
        )
        state.max_length = DEFAULT_MAX_LENGTH


def step_count(kit: GibberKit, state: RunState, value, flag):
    """Set count of gibberish words, then generate up to it."""
    state.count = parse_int(_require(value, flag))
    if state.count < 1:
        logger.warning(f"Invalid count {value!r}, using {DEFAULT_COUNT}")
        state.count = DEFAULT_COUNT
    kit.generate(count=state.count, min_length=state.min_length, max_length=state.max_length)


def step_output(kit: GibberKit, state: RunState, value, flag):
    state.output_path = _require(value, flag)
    kit.save_output(state.output_path)


def step_save_rules(kit: GibberKit, state: RunState, value, flag):
    kit.save_rules(_require(value, flag))


def step_load_rules(kit: GibberKit, state: RunState, value, flag):
    kit.load_rules(_require(value, flag))


def step_verbose(kit: GibberKit, state: RunState, value, flag):
    _raise_verbosity(logging.DEBUG)


def step_very_verbose(kit: GibberKit, state: RunState, value, flag):
    _raise_verbosity(logging.INFO)


def _raise_verbosity(level: int):
    pkg_logger = logging.getLogger('gibberkit')
    if pkg_logger.level == logging.NOTSET or level < pkg_logger.level:
        pkg_logger.setLevel(level)


STEPS = {
    'train': step_train,
    'exclude': step_exclude,
    'save_training': step_save_training,
    'save_exclusions': step_save_exclusions,
    'min_length': step_min_length,
    'max_length': step_max_length,
    'count': step_count,
    'output': step_output,
    'save_rules': step_save_rules,
    'load_rules': step_load_rules,
    'verbose': step_verbose,
    'very_verbose': step_very_verbose,
}


# =============================================================================
# Main
# =============================================================================

def build_parser() -> GibberParser:
    parser = GibberParser(
        prog='gibberkit',
        description=(
            'Generate new pronounceable words in your language of choice. Usage rules\n'
            'are built from a template text file; generated words follow those rules\n'
            'but never repeat a template word or an excluded word.'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog=f"""
Options are carried out in the order given.

Defaults: -n {DEFAULT_MIN_LENGTH}  -m {DEFAULT_MAX_LENGTH}  -c {DEFAULT_COUNT}

Examples:
  %(prog)s -t french.txt -c 20
  %(prog)s -t english.txt -x words.txt -n 5 -m 7 -c 500 -f out.txt
  %(prog)s -t english.txt -l template-words.txt --save-rules rules.json
"""
    )

    def add_step(*flags, dest, metavar=None, help=None):
        nargs = '?' if metavar else 0
        parser.add_argument(*flags, dest=dest, action=StepAction, nargs=nargs,
                            metavar=metavar, help=help)

    add_step('-t', '-T', '--train', dest='train', metavar='FILE',
             help='Build language rules from this text file')
    add_step('-x', '-X', '--exclude', dest='exclude', metavar='FILE',
             help='Exclude all words in this text file from generated words')
    add_step('-l', '-L', '--save-training', dest='save_training', metavar='FILE',
             help='Save unique words from language file(s) as dictionary')
    add_step('-b', '-B', '--save-excluded', dest='save_exclusions', metavar='FILE',
             help='Save all excluded (bad) words to file as dictionary')
    add_step('-n', '-N', '--min-length', dest='min_length', metavar='N',
             help='Generate words no shorter than this many characters')
    add_step('-m', '-M', '--max-length', dest='max_length', metavar='N',
             help='Generate words no longer than this many characters')
    add_step('-c', '-C', '--count', dest='count', metavar='N',
             help='Count. Generate this many unique words')
    add_step('-f', '-F', '--output', dest='output', metavar='FILE',
             help='Output generated words to file instead of stdout')
    add_step('--save-rules', dest='save_rules', metavar='FILE',
             help='Save character usage rules as JSON')
    add_step('--load-rules', dest='load_rules', metavar='FILE',
             help='Add character usage rules from a JSON file')
    add_step('-v', '-V', '--verbose', dest='verbose', help='Be verbose')
    add_step('-w', '-W', '--very-verbose', dest='very_verbose', help='Be very verbose')
    parser.add_argument('-h', '-H', '--help', dest='help', action=StepAction, nargs=0,
                        help='Print this message')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def run(argv=None, stdout=None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0

    out = Output(stdout)
    kit = GibberKit()
    state = RunState()

    for dest, value, flag in getattr(args, 'steps', None) or []:
        if dest == 'help':
            parser.print_help(sys.stderr)
            return 0
        try:
            STEPS[dest](kit, state, value, flag)
        except (FileOpenError, MissingArgumentError, RulesFormatError,
                DegenerateGenerationError) as e:
            logger.error(str(e))

    if state.output_path is None:
        out.words(kit)
    return 0


def main(argv=None) -> int:
    pkg_logger = logging.getLogger('gibberkit')
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    pkg_logger.addHandler(handler)
    previous_level = pkg_logger.level
    pkg_logger.setLevel(logging.WARNING)

    try:
        return run(argv)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 130
    except OutOfMemoryError as e:
        Output().error(str(e))
        return 1
    finally:
        pkg_logger.removeHandler(handler)
        pkg_logger.setLevel(previous_level)


if __name__ == '__main__':
    sys.exit(main())

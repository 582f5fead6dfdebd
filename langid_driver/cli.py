"""
Command-line entry point: parses flags, picks the operating mode, owns the model.
"""
import sys
import argparse
import logging
from typing import Callable, List, Optional

from . import __version__
from .models import model_factory
from .strategies import run_interactive, run_lines, run_batch, run_file
from .corpus_filter import filter_corpus
from .utils import FILTER_BANNER

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FATAL = 255


class DriverArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = DriverArgumentParser(
        prog='langid-driver',
        description='Identify the language of text read from stdin, or filter a parallel corpus')

    # Mode arguments
    parser.add_argument('-l', dest='line_mode', action='store_true',
                        help='Line mode: classify every input line')
    parser.add_argument('-b', dest='batch_mode', action='store_true',
                        help='Batch mode: each input line is a path to a file to classify')
    parser.add_argument('-f', dest='filter_args', nargs=4,
                        metavar=('PREFIX', 'SRC', 'TGT', 'DEST'),
                        help='Filter mode: keep pairs of PREFIX.SRC/PREFIX.TGT tagged SRC/TGT, '
                             'writing them to DEST.SRC/DEST.TGT')

    # Model arguments
    parser.add_argument('-m', dest='model_path', metavar='PATH',
                        help='fastText model file or langdetect profile directory')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose logging')
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    return parser


def selected_modes(args: argparse.Namespace) -> List[str]:
    modes = []
    if args.line_mode:
        modes.append('-l')
    if args.batch_mode:
        modes.append('-b')
    if args.filter_args:
        modes.append('-f')
    return modes


def dispatch(args: argparse.Namespace, model, factory: Callable, stdin, stdout) -> int:
    """Run the mode selected by ``args`` with an already loaded model."""
    if args.filter_args:
        prefix, src, tgt, dest_prefix = args.filter_args
        print(FILTER_BANNER, file=stdout)
        filter_corpus(model, prefix, src, tgt, dest_prefix, model_factory=factory)
    elif args.line_mode:
        run_lines(model, stdin, stdout)
    elif args.batch_mode:
        run_batch(model, stdin, stdout)
    elif stdin.isatty():
        run_interactive(model, stdin, stdout)
    else:
        run_file(model, stdin, stdout)
    return EXIT_OK


def main(argv: Optional[List[str]] = None, stdin=None, stdout=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    modes = selected_modes(args)
    if len(modes) > 1:
        print(f"Cannot specify more than one of -l, -b and -f (got {' '.join(modes)}).", file=sys.stderr)
        return EXIT_FATAL

    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout

    factory = model_factory(args.model_path)
    try:
        model = factory()
    except (OSError, RuntimeError) as e:
        logger.error(f"Failed to load model: {e}")
        return EXIT_FATAL

    try:
        return dispatch(args, model, factory, stdin, stdout)
    except (OSError, RuntimeError, ValueError) as e:
        logger.error(f"{e}")
        return EXIT_FATAL
    finally:
        model.release()
        stdout.flush()


if __name__ == '__main__':
    sys.exit(main())

"""
Input acquisition strategies for the non-filter modes.

Each strategy reads units from a binary input stream, classifies them with
the model it is given and prints one result line per unit.
"""
import os
import sys
import mmap
import logging
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional, TextIO

from .utils import (
    NO_FILE, NOT_FILE, INTERACTIVE_BANNER, PROMPT, FAREWELL,
    format_result, format_batch_result, decode_path, is_blank_line
)

logger = logging.getLogger(__name__)


def _streams(stdin: Optional[BinaryIO], stdout: Optional[TextIO]):
    return (stdin if stdin is not None else sys.stdin.buffer,
            stdout if stdout is not None else sys.stdout)


def prompt_lines(stdin: BinaryIO, stdout: TextIO, prompt: str = PROMPT) -> Iterator[bytes]:
    """Yield lines typed at the prompt until end-of-input or an empty line."""
    while True:
        stdout.write(prompt)
        stdout.flush()
        line = stdin.readline()
        if not line or is_blank_line(line):
            return
        yield line


def run_interactive(model, stdin: Optional[BinaryIO] = None, stdout: Optional[TextIO] = None) -> int:
    """Interactive mode: classify each line typed at the prompt."""
    stdin, stdout = _streams(stdin, stdout)
    print(INTERACTIVE_BANNER, file=stdout)

    count = 0
    for line in prompt_lines(stdin, stdout):
        print(format_result(model.classify(line), len(line)), file=stdout)
        count += 1

    print(FAREWELL, file=stdout)
    return count


def run_lines(model, stdin: Optional[BinaryIO] = None, stdout: Optional[TextIO] = None) -> int:
    """Line mode: classify every input line on its own."""
    stdin, stdout = _streams(stdin, stdout)

    count = 0
    for line in stdin:
        print(format_result(model.classify(line), len(line)), file=stdout)
        count += 1

    return count


@contextmanager
def mapped_file(handle: BinaryIO) -> Iterator:
    """
    Read-only view over the whole of an open file.

    Empty files are not mapped (a zero-length mapping is an error); they
    yield an empty buffer instead. The mapping is closed on every exit path.
    """
    size = os.fstat(handle.fileno()).st_size
    if size == 0:
        yield b''
        return

    view = mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ)
    try:
        yield view
    finally:
        view.close()


def classify_path(model, path: str):
    """
    Classify the contents of one file.

    Returns:
        (length, language) where language is a sentinel if the path
        cannot be opened as a regular file
    """
    try:
        handle = open(path, 'rb')
    except OSError as e:
        sentinel = NOT_FILE if os.path.isdir(path) else NO_FILE
        logger.debug(f"Cannot open {path}: {e}")
        return 0, sentinel

    # Mapping failures are not per-record anomalies and propagate
    with handle, mapped_file(handle) as view:
        return len(view), model.classify(view)


def run_batch(model, stdin: Optional[BinaryIO] = None, stdout: Optional[TextIO] = None) -> int:
    """Batch mode: each input line names a file to classify as a whole."""
    stdin, stdout = _streams(stdin, stdout)

    count = 0
    for raw in stdin:
        path = decode_path(raw)
        if not path:
            logger.debug("Skipping blank line in path list")
            continue

        length, lang = classify_path(model, path)
        print(format_batch_result(path, length, lang), file=stdout)
        count += 1

    return count


def run_file(model, stdin: Optional[BinaryIO] = None, stdout: Optional[TextIO] = None) -> int:
    """File mode: classify the whole input stream as one document."""
    stdin, stdout = _streams(stdin, stdout)

    text = stdin.read()
    print(format_result(model.classify(text), len(text)), file=stdout)
    return 1

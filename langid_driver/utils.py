"""
Utility functions and constants shared by the input strategies and the filter.
"""
import os
from dataclasses import dataclass


# Language code reported when a buffer carries nothing to classify
UNKNOWN = 'un'

# Batch mode sentinels, printed in place of a language
NO_FILE = 'NOSUCHFILE'
NOT_FILE = 'NOTAFILE'

INTERACTIVE_BANNER = 'langid interactive mode.'
FILTER_BANNER = 'langid filtering mode.'
PROMPT = '>>> '
FAREWELL = 'Bye!'

# Infix of the temporary tag files written next to the corpora
TAG_INFIX = 'lid'


@dataclass(frozen=True)
class CorpusPaths:
    """Files touched by one filter run."""
    source: str
    target: str
    source_tags: str
    target_tags: str
    source_dest: str
    target_dest: str


def corpus_paths(prefix: str, src: str, tgt: str, dest_prefix: str) -> CorpusPaths:
    """Derive the corpus, tag and destination paths for a filter run."""
    return CorpusPaths(
        source=f"{prefix}.{src}",
        target=f"{prefix}.{tgt}",
        source_tags=f"{prefix}.{TAG_INFIX}.{src}",
        target_tags=f"{prefix}.{TAG_INFIX}.{tgt}",
        source_dest=f"{dest_prefix}.{src}",
        target_dest=f"{dest_prefix}.{tgt}",
    )


def strip_terminator(line: bytes) -> bytes:
    """Remove one trailing line terminator, if present."""
    if line.endswith(b'\r\n'):
        return line[:-2]
    if line.endswith(b'\n'):
        return line[:-1]
    return line


def is_blank_line(line: bytes) -> bool:
    """True for a line made only of a line terminator."""
    return line in (b'\n', b'\r\n')


def format_result(lang: str, length: int) -> str:
    """Result line for interactive, line and file modes."""
    return f"{lang},{length}"


def printable_path(path: str) -> str:
    """Path as text that any output encoding accepts; undecodable bytes become \\xNN escapes."""
    return os.fsencode(path).decode('utf-8', errors='backslashreplace')


def format_batch_result(path: str, length: int, lang: str) -> str:
    """Result line for batch mode."""
    return f"{printable_path(path)},{length},{lang}"


def decode_path(raw: bytes) -> str:
    """Turn a path read from stdin into a filesystem path string."""
    return os.fsdecode(strip_terminator(raw))

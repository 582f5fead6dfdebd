"""
Parallel corpus filtering.

Both sides of a sentence-aligned corpus are tagged concurrently, one
predicted language per line, into temporary tag files. The corpora and the
tag files are then scanned in lock-step and only the pairs whose tags match
the expected languages are written to the destination files.
"""
import os
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, Optional

from .utils import CorpusPaths, corpus_paths, strip_terminator

logger = logging.getLogger(__name__)


@dataclass
class FilterStats:
    """Counts gathered over one filter run."""
    source_lines: int = 0
    target_lines: int = 0
    examined: int = 0
    kept: int = 0

    @property
    def dropped(self) -> int:
        return self.examined - self.kept

    @property
    def unmatched(self) -> int:
        """Lines on the longer side that have no counterpart."""
        return abs(self.source_lines - self.target_lines)


@contextmanager
def temporary_tag_file(path: str) -> Iterator[BinaryIO]:
    """Create a fresh tag file that is closed and deleted on exit."""
    handle = open(path, 'w+b')
    try:
        with handle:
            yield handle
    finally:
        os.remove(path)
        logger.debug(f"Removed tag file {path}")


def tag_stream(model, corpus: BinaryIO, tags: BinaryIO) -> int:
    """Write one predicted language code per corpus line."""
    count = 0
    for line in corpus:
        tags.write(model.classify(line).encode('utf-8') + b'\n')
        count += 1
    tags.flush()
    return count


def tag_with_private_model(factory: Callable, corpus: BinaryIO, tags: BinaryIO) -> int:
    """Tag a corpus with a model instance owned by the calling worker."""
    model = factory()
    try:
        return tag_stream(model, corpus, tags)
    finally:
        model.release()


def scan_tagged(source: BinaryIO, target: BinaryIO,
                source_tags: BinaryIO, target_tags: BinaryIO,
                source_dest: BinaryIO, target_dest: BinaryIO,
                src: str, tgt: str):
    """
    Lock-step scan over the corpora and their tags.

    Stops as soon as any of the four streams is exhausted.

    Returns:
        (examined, kept) pair counts
    """
    expected_src = src.encode('utf-8')
    expected_tgt = tgt.encode('utf-8')

    examined = kept = 0
    for src_line, tgt_line, src_tag, tgt_tag in zip(source, target, source_tags, target_tags):
        examined += 1
        if strip_terminator(src_tag) == expected_src and strip_terminator(tgt_tag) == expected_tgt:
            source_dest.write(src_line)
            target_dest.write(tgt_line)
            kept += 1

    return examined, kept


def _open_all(stack: ExitStack, paths: CorpusPaths):
    """Open the six files of a run; anything already opened is released on failure."""
    return (
        stack.enter_context(open(paths.source, 'rb')),
        stack.enter_context(open(paths.target, 'rb')),
        stack.enter_context(temporary_tag_file(paths.source_tags)),
        stack.enter_context(temporary_tag_file(paths.target_tags)),
        stack.enter_context(open(paths.source_dest, 'wb')),
        stack.enter_context(open(paths.target_dest, 'wb')),
    )


def filter_corpus(model, prefix: str, src: str, tgt: str, dest_prefix: str,
                  model_factory: Optional[Callable] = None) -> FilterStats:
    """
    Filter ``prefix.src``/``prefix.tgt`` into ``dest_prefix.src``/``dest_prefix.tgt``.

    Args:
        model: Model used to tag the target side
        prefix: Corpus filename prefix
        src: Expected source language code
        tgt: Expected target language code
        dest_prefix: Destination filename prefix
        model_factory: Builds the private model that tags the source side;
            when omitted both sides share ``model`` and are tagged in turn

    Returns:
        FilterStats for the run
    """
    if src == tgt:
        # Both sides would resolve to the same corpus, tag and output files
        raise ValueError(f"Source and target languages must differ, got {src!r} twice")

    paths = corpus_paths(prefix, src, tgt, dest_prefix)
    stats = FilterStats()

    with ExitStack() as stack:
        source, target, source_tags, target_tags, source_dest, target_dest = _open_all(stack, paths)
        logger.info(f"Tagging {paths.source} and {paths.target}")

        if model_factory is not None:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix='tagger') as pool:
                source_job = pool.submit(tag_with_private_model, model_factory, source, source_tags)
                target_job = pool.submit(tag_stream, model, target, target_tags)
                # Join barrier: both tag files are complete past this point
                stats.source_lines = source_job.result()
                stats.target_lines = target_job.result()
        else:
            stats.source_lines = tag_stream(model, source, source_tags)
            stats.target_lines = tag_stream(model, target, target_tags)

        for handle in (source, target, source_tags, target_tags):
            handle.seek(0)

        stats.examined, stats.kept = scan_tagged(
            source, target, source_tags, target_tags,
            source_dest, target_dest, src, tgt)

    if stats.unmatched:
        logger.warning(
            f"Corpus length mismatch: {stats.source_lines} {src} lines, "
            f"{stats.target_lines} {tgt} lines; only {stats.examined} pairs examined")

    logger.info(f"Seen {stats.examined}, kept {stats.kept}")
    return stats

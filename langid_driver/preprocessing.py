"""
Preprocessing utilities for turning raw byte buffers into classifier input.
"""
import re
import unicodedata


class TextPreprocessor:
    """Decodes byte buffers and normalizes the resulting text."""

    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding

        # fastText predicts one line at a time and rejects embedded newlines
        self.newline_pattern = re.compile(r'[\r\n]+')
        self.whitespace_pattern = re.compile(r'\s+')

    def decode(self, buffer) -> str:
        """Decode a bytes-like buffer, replacing undecodable sequences."""
        if isinstance(buffer, str):
            return buffer
        return bytes(buffer).decode(self.encoding, errors='replace')

    def normalize_text(self, text: str) -> str:
        """Apply Unicode normalization and basic cleaning."""
        # Unicode NFKC normalization
        text = unicodedata.normalize('NFKC', text)

        # Remove control characters except common whitespace
        text = ''.join(char for char in text if unicodedata.category(char)[0] != 'C' or char in '\t\n\r ')

        return text

    def prepare(self, buffer, single_line: bool = False) -> str:
        """
        Main preprocessing pipeline.

        Args:
            buffer: Raw bytes (or an mmap view) to classify
            single_line: Collapse line breaks so the text is one line

        Returns:
            Normalized text, stripped of surrounding whitespace
        """
        text = self.normalize_text(self.decode(buffer))

        if single_line:
            text = self.newline_pattern.sub(' ', text)
            text = self.whitespace_pattern.sub(' ', text)

        return text.strip()

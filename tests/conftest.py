"""Pytest configuration and shared fixtures.

Makes the repository root importable and provides a deterministic keyword
model so driver behaviour can be tested without depending on a statistical
classifier's guesses.
"""

import os
import sys

import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from langid_driver.models import LanguageModel  # noqa: E402
from langid_driver.utils import UNKNOWN  # noqa: E402

KEYWORDS = {
    'hello': 'en',
    'world': 'en',
    'the': 'en',
    'bonjour': 'fr',
    'monde': 'fr',
    'le': 'fr',
    'hallo': 'de',
    'welt': 'de',
}


class KeywordModel(LanguageModel):
    """Tags text with the language of its first known keyword."""

    name = 'keyword'

    def __init__(self):
        super().__init__()
        self.seen = []

    def _classify(self, buffer) -> str:
        text = self.preprocessor.prepare(buffer).lower()
        self.seen.append(text)
        for word in text.split():
            lang = KEYWORDS.get(word.strip('.,!?'))
            if lang:
                return lang
        return UNKNOWN


class KeywordModelFactory:
    """Builds KeywordModel instances and remembers each one."""

    def __init__(self):
        self.models = []

    def __call__(self) -> KeywordModel:
        model = KeywordModel()
        self.models.append(model)
        return model


@pytest.fixture
def model() -> KeywordModel:
    return KeywordModel()


@pytest.fixture
def factory() -> KeywordModelFactory:
    return KeywordModelFactory()


def write_lines(path, lines):
    """Write ``lines`` (str) as UTF-8 bytes with no added terminators."""
    with open(path, 'wb') as f:
        for line in lines:
            f.write(line.encode('utf-8'))


def read_bytes(path) -> bytes:
    with open(path, 'rb') as f:
        return f.read()

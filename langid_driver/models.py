"""
Language identification model boundary.

The classifiers themselves come from third-party libraries; this module only
wraps them behind one small interface: build a model, classify a buffer,
release the model.
"""
import os
import logging
from typing import Callable, Optional

from langdetect.detector_factory import DetectorFactory, PROFILES_DIRECTORY
from langdetect.lang_detect_exception import LangDetectException

from .preprocessing import TextPreprocessor
from .utils import UNKNOWN

logger = logging.getLogger(__name__)

# langdetect reports this when no language clears its probability threshold
LANGDETECT_UNKNOWN = 'unknown'

FASTTEXT_LABEL_PREFIX = '__label__'


class ModelLoadError(RuntimeError):
    """Raised when a language identification model cannot be constructed."""


class LanguageModel:
    """Base class for language identification models."""

    name = 'model'

    def __init__(self):
        self.preprocessor = TextPreprocessor()
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def classify(self, buffer) -> str:
        """Return the language code predicted for a bytes-like buffer."""
        if self._released:
            raise RuntimeError(f"{self.name} model used after release")
        return self._classify(buffer)

    def _classify(self, buffer) -> str:
        raise NotImplementedError

    def release(self):
        """Invalidate the model. Releasing twice is a no-op."""
        if self._released:
            return
        self._release()
        self._released = True
        logger.debug(f"Released {self.name} model")

    def _release(self):
        pass


class LangdetectModel(LanguageModel):
    """Model backed by a set of langdetect language profiles."""

    name = 'langdetect'

    def __init__(self, profile_directory: str = PROFILES_DIRECTORY, seed: int = 0):
        super().__init__()
        self.profile_directory = profile_directory

        # A private factory per model, so concurrent users never share one
        self.factory = DetectorFactory()
        try:
            self.factory.load_profile(profile_directory)
        except (LangDetectException, OSError, ValueError) as e:
            raise ModelLoadError(f"Failed to load langdetect profiles from {profile_directory}: {e}") from e
        self.factory.seed = seed

        logger.info(f"Loaded langdetect profiles for {len(self.factory.get_lang_list())} languages")

    def _classify(self, buffer) -> str:
        text = self.preprocessor.prepare(buffer)
        if not text:
            return UNKNOWN

        detector = self.factory.create()
        detector.append(text)
        try:
            lang = detector.detect()
        except LangDetectException:
            # No features in text (digits, punctuation only)
            return UNKNOWN

        return UNKNOWN if lang == LANGDETECT_UNKNOWN else lang

    def _release(self):
        self.factory = None


class FastTextModel(LanguageModel):
    """Model backed by a fastText language identification binary."""

    name = 'fasttext'

    def __init__(self, model_path: str):
        super().__init__()
        self.model_path = model_path

        try:
            import fasttext
        except ImportError as e:
            raise ModelLoadError("fasttext is not installed; install the 'fasttext' extra") from e

        try:
            self.model = fasttext.load_model(model_path)
        except ValueError as e:
            raise ModelLoadError(f"Failed to load FastText model from {model_path}: {e}") from e

        logger.info(f"Loaded FastText model from {model_path}")

    def _classify(self, buffer) -> str:
        # Clean text for FastText
        text = self.preprocessor.prepare(buffer, single_line=True)
        if not text:
            return UNKNOWN

        labels, _ = self.model.predict(text, k=1)
        if not labels:
            return UNKNOWN

        return labels[0].replace(FASTTEXT_LABEL_PREFIX, '')

    def _release(self):
        self.model = None


def new_default() -> LanguageModel:
    """Construct the built-in model (langdetect's bundled profiles)."""
    return LangdetectModel()


def new_from_path(path: str) -> LanguageModel:
    """
    Construct a model from a path.

    A directory is read as a langdetect profile directory, any other path
    as a fastText binary.
    """
    if os.path.isdir(path):
        return LangdetectModel(profile_directory=path)
    if not os.path.exists(path):
        raise ModelLoadError(f"Model file not found: {path}")
    return FastTextModel(path)


def model_factory(model_path: Optional[str] = None) -> Callable[[], LanguageModel]:
    """Return a callable that builds a fresh model from the same source on each call."""
    if model_path is None:
        return new_default

    def load() -> LanguageModel:
        return new_from_path(model_path)

    return load

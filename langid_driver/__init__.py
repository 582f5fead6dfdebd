"""
Command-line language identification driver

Classifies text read from stdin (interactively, line by line, as a list of
file paths, or as one document) and filters sentence-aligned parallel corpora
down to the pairs whose sides are written in the expected languages.
"""

__version__ = "1.0.0"

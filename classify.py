#!/usr/bin/env python3
"""
Language identification from the command line.

Examples:
    echo "Bonjour tout le monde" | python classify.py
    python classify.py -l < sentences.txt
    find docs -name '*.txt' | python classify.py -b
    python classify.py -f corpus/train en fr corpus/clean
    python classify.py -m models/lid.176.bin -l < sentences.txt
"""
import sys

from langid_driver.cli import main


if __name__ == '__main__':
    sys.exit(main())

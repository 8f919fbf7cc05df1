#!/usr/bin/env python3
"""Run the foldertree unit tests without pytest: python tests/run_tests.py [-q]"""
import os
import sys
import unittest


def run_tests(verbosity: int = 2) -> bool:
    """Discover and run everything under tests/unit."""
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    sys.path.insert(0, root)

    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(root, 'tests', 'unit'), pattern='test_*.py')

    result = unittest.TextTestRunner(verbosity=verbosity).run(suite)
    return result.wasSuccessful()


if __name__ == "__main__":
    quiet = "-q" in sys.argv[1:]
    sys.exit(0 if run_tests(verbosity=1 if quiet else 2) else 1)

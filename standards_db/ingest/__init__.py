"""Corpus loading from standards table files."""

from .corpus_loader import load_corpus, load_standards, read_table_file, resolve_standards_paths

__all__ = [
    "load_corpus",
    "load_standards",
    "read_table_file",
    "resolve_standards_paths",
]

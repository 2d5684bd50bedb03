"""
Unified test infrastructure for stache.

Modules:
- file_utils: Utilities for creating template files and observing file reads
"""

from .file_utils import write, write_templates, CountingReader

__all__ = ["write", "write_templates", "CountingReader"]

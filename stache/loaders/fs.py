from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Tuple

import pathspec

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Default file-read collaborator: strict UTF-8, errors propagate."""
    with path.open(encoding="utf-8") as f:
        return f.read()


def logical_name(rel_posix: str, extension: str) -> str:
    """
    Logical template name: path relative to the templates directory,
    '/'-separated, with the template extension stripped.
    """
    return rel_posix[: -len(extension)] if rel_posix.endswith(extension) else rel_posix


def iter_template_files(
    root: Path,
    *,
    extension: str,
    spec_exclude: Optional[pathspec.PathSpec] = None,
) -> Iterable[Tuple[str, Path]]:
    """
    Recursive template file iterator.
    Yields (logical name, path) pairs in a stable (sorted) order.
    """
    root = root.resolve()
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()

        # Early pruning (in-place modification of dirnames)
        if spec_exclude:
            keep = []
            for d in dirnames:
                rel_dir = Path(dirpath, d).relative_to(root).as_posix()
                if not spec_exclude.match_file(rel_dir + "/"):
                    keep.append(d)
            dirnames[:] = keep

        for fn in sorted(filenames):
            # A file named exactly like the extension would yield an empty name
            if not fn.endswith(extension) or fn == extension:
                continue
            p = Path(dirpath, fn)
            rel_posix = p.relative_to(root).as_posix()
            if spec_exclude and spec_exclude.match_file(rel_posix):
                continue
            yield logical_name(rel_posix, extension), p


__all__ = ["read_text", "logical_name", "iter_template_files"]

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Directory snapshots used to infer header search directories.

A FileTree answers one question: under which absolute roots does a given
relative path (for example "sub/x.h") exist? Discovery uses the answer to guess
search directories for includes that no known directory resolves.
"""

import os
import abc
import logging
import time
from collections import defaultdict
from typing import DefaultDict, List, Optional, Set, Tuple

from .constants import EXCLUDED_SOURCE_DIRS
from .file_path import FilePath, PathLike

logger = logging.getLogger(__name__)


def split_relative_path(relative_path: PathLike) -> Optional[Tuple[str, ...]]:
    """Split a relative include path into normalized components.

    Args:
        relative_path: Path as written in an include directive

    Returns:
        Tuple of path components, or None when the path is empty, absolute or escapes upward with '..'
    """
    path = FilePath.of(relative_path)
    if not path or path.is_absolute():
        return None

    parts = [part for part in path.path.replace("\\", "/").split("/") if part not in ("", ".")]
    if not parts or ".." in parts:
        return None
    return tuple(parts)


class FileTree(abc.ABC):
    """Lookup from a relative file path to the absolute roots that contain it."""

    @abc.abstractmethod
    def get_absolute_root_paths_for_relative_file_path(self, relative_path: PathLike) -> List[FilePath]:
        """Return every root such that root + relative_path is a file of this tree, in sorted order."""


class FileSystemFileTree(FileTree):
    """FileTree backed by a one-time walk of a directory on disk.

    Every file is indexed under each of its relative suffixes, so for a file
    /ext/a/sub/x.h the lookup "sub/x.h" yields /ext/a and "x.h" yields /ext/a/sub.

    Attributes:
        root_path: Canonical root directory of the snapshot
    """

    def __init__(self, root_path: PathLike):
        self.root_path = FilePath.of(root_path).make_canonical()
        self._suffix_to_roots: DefaultDict[Tuple[str, ...], Set[str]] = defaultdict(set)
        self._file_count = 0
        self._scan()

    def _scan(self) -> None:
        if not self.root_path.is_directory():
            logger.warning("Searched path is not a directory, ignoring: %s", self.root_path)
            return

        start_time = time.time()
        root = self.root_path.path
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = [d for d in dirnames if d not in EXCLUDED_SOURCE_DIRS]
            rel_dir = os.path.relpath(dirpath, root)
            dir_parts = () if rel_dir == os.curdir else tuple(rel_dir.split(os.sep))

            for filename in filenames:
                parts = dir_parts + (filename,)
                for i in range(len(parts)):
                    self._suffix_to_roots[parts[i:]].add(os.path.join(root, *parts[:i]))
                self._file_count += 1

        logger.debug("Scanned %s files below %s in %.2fs", self._file_count, root, time.time() - start_time)

    @property
    def file_count(self) -> int:
        return self._file_count

    def get_absolute_root_paths_for_relative_file_path(self, relative_path: PathLike) -> List[FilePath]:
        parts = split_relative_path(relative_path)
        if parts is None:
            return []
        return [FilePath(root) for root in sorted(self._suffix_to_roots.get(parts, ()))]

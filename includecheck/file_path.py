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
"""Immutable file path value used as the identity of files in include processing.

FilePath wraps a path string and orders/compares on that string, so sets of
FilePath values iterate in sorted order. Identity of on-disk files is only
reliable after make_canonical(), which collapses symlinks and dot segments
into one string form.
"""

import os
from dataclasses import dataclass
from typing import Union

PathLike = Union["FilePath", str, "os.PathLike[str]"]


@dataclass(frozen=True, order=True)
class FilePath:
    """Path value with the operations include resolution needs.

    An empty FilePath ("") stands for "no path": it never exists, is falsy,
    and stays empty under get_absolute() and make_canonical().

    Attributes:
        path: Path string as given (not normalized)
    """

    path: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.path, str):
            object.__setattr__(self, "path", os.fspath(self.path))

    @classmethod
    def of(cls, value: PathLike) -> "FilePath":
        """Return value as a FilePath, reusing it when it already is one."""
        if isinstance(value, FilePath):
            return value
        return cls(os.fspath(value))

    def __str__(self) -> str:
        return self.path

    def __fspath__(self) -> str:
        return self.path

    def __bool__(self) -> bool:
        return bool(self.path)

    def is_empty(self) -> bool:
        return not self.path

    def is_absolute(self) -> bool:
        return bool(self.path) and os.path.isabs(self.path)

    def get_absolute(self) -> "FilePath":
        """Resolve against the process working directory."""
        if not self.path:
            return self
        return FilePath(os.path.abspath(self.path))

    def make_canonical(self) -> "FilePath":
        """Absolute path with symlinks and '.'/'..' segments resolved.

        Idempotent: two spellings of the same on-disk file produce identical strings.
        """
        if not self.path:
            return self
        return FilePath(os.path.realpath(self.path))

    def get_parent_directory(self) -> "FilePath":
        return FilePath(os.path.dirname(self.path))

    def concatenate(self, other: PathLike) -> "FilePath":
        """Append a relative path. An empty side yields the other side unchanged."""
        other_path = FilePath.of(other).path
        if not other_path:
            return self
        if not self.path:
            return FilePath(other_path)
        return FilePath(os.path.join(self.path, other_path))

    def exists(self) -> bool:
        return bool(self.path) and os.path.exists(self.path)

    def is_directory(self) -> bool:
        return bool(self.path) and os.path.isdir(self.path)

    def contains(self, other: PathLike) -> bool:
        """Check whether other is this path or lies below it.

        Both sides are compared in canonical form. A sibling that only shares a
        string prefix ("/src/lib" vs "/src/library") is not contained.
        """
        other_path = FilePath.of(other)
        if not self.path or not other_path.path:
            return False

        directory = self.make_canonical().path
        candidate = other_path.make_canonical().path
        if candidate == directory:
            return True

        prefix = directory if directory.endswith(os.sep) else directory + os.sep
        return candidate.startswith(prefix)

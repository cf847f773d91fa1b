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
"""Line-oriented read access to source files."""

import logging
from typing import List, Optional

from .file_path import FilePath, PathLike

logger = logging.getLogger(__name__)


def _split_physical_lines(text: str) -> List[str]:
    """Split on newlines only; other Unicode line boundaries (form feed, U+2028, ...) stay inside their line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class TextAccess:
    """Ordered lines of one text, without line terminators, plus the originating path."""

    def __init__(self, lines: List[str], file_path: Optional[FilePath] = None):
        self._lines = lines
        self._file_path = file_path if file_path is not None else FilePath()

    @classmethod
    def create_from_file(cls, file_path: PathLike) -> "TextAccess":
        """Read a file into a TextAccess.

        A file that cannot be read (vanished, permission denied, is a directory)
        yields an empty TextAccess instead of raising.

        Args:
            file_path: File to read

        Returns:
            TextAccess holding the file's lines
        """
        path = FilePath.of(file_path)
        try:
            with open(path.path, "r", encoding="utf-8", errors="ignore") as f:
                text = f.read()
        except (IOError, OSError) as e:
            logger.debug("Could not read %s: %s", path, e)
            return cls([], path)
        return cls(_split_physical_lines(text), path)

    @classmethod
    def create_from_string(cls, text: str, file_path: Optional[PathLike] = None) -> "TextAccess":
        return cls(_split_physical_lines(text), FilePath.of(file_path) if file_path is not None else None)

    def get_file_path(self) -> FilePath:
        return self._file_path

    def get_all_lines(self) -> List[str]:
        return list(self._lines)

    def get_line_count(self) -> int:
        return len(self._lines)


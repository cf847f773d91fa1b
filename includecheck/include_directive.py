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
"""Lexical extraction of #include directives from C/C++ source text.

This is not a preprocessor: conditionals are not evaluated, macros are not
expanded, and commented-out includes are reported like any other. A line is a
directive when, after trimming, it starts with '#' and the remainder (trimmed
again) starts with 'include'. The included path is the text between the first
'<' and the following '>', or failing that between the first pair of '"'.
"""

import os
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .constants import DIRECTIVE_PREFIX, INCLUDE_KEYWORD
from .file_path import FilePath, PathLike
from .text_access import TextAccess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncludeDirective:
    """One include directive as written in a source file.

    Attributes:
        included_file: Included path as written, not resolved
        including_file: File containing the directive
        line_number: 1-based physical line of the directive
        uses_angle_brackets: True for #include <...>, False for #include "..."
    """

    included_file: FilePath
    including_file: FilePath
    line_number: int
    uses_angle_brackets: bool

    def sort_key(self) -> FilePath:
        """Key that orders and deduplicates unresolved directives (included path only)."""
        return self.included_file

    def format_include(self) -> str:
        if self.uses_angle_brackets:
            return f"<{self.included_file}>"
        return f'"{self.included_file}"'

    def format_location(self, project_root: Optional[str] = None) -> str:
        """Render 'file:line', with file relative to project_root when it lies inside it."""
        including = str(self.including_file)
        if project_root and FilePath(project_root).contains(self.including_file):
            including = os.path.relpath(FilePath(including).make_canonical().path, FilePath(project_root).make_canonical().path)
        return f"{including}:{self.line_number}"


def _substr_between(text: str, start: str, end: str) -> str:
    """Text between the first start delimiter and the next end delimiter, or ''."""
    begin = text.find(start)
    if begin == -1:
        return ""
    finish = text.find(end, begin + len(start))
    if finish == -1:
        return ""
    return text[begin + len(start) : finish]


def parse_include_line(line: str) -> Optional[Tuple[str, bool]]:
    """Parse a single line into (included_path, uses_angle_brackets).

    Args:
        line: One physical source line

    Returns:
        Tuple of (included path, uses_angle_brackets), or None if the line is not a directive
    """
    line_trimmed_to_hash = line.strip()
    if not line_trimmed_to_hash.startswith(DIRECTIVE_PREFIX):
        return None

    line_trimmed_to_include = line_trimmed_to_hash[len(DIRECTIVE_PREFIX) :].strip()
    if not line_trimmed_to_include.startswith(INCLUDE_KEYWORD):
        return None

    include_string = _substr_between(line_trimmed_to_include, "<", ">")
    uses_brackets = True
    if not include_string:
        include_string = _substr_between(line_trimmed_to_include, '"', '"')
        uses_brackets = False

    if not include_string:
        return None
    return include_string, uses_brackets


def get_include_directives_from_text(text_access: TextAccess) -> List[IncludeDirective]:
    """Extract all include directives from already loaded text.

    Args:
        text_access: Lines and originating path of one file

    Returns:
        Directives in line order
    """
    include_directives: List[IncludeDirective] = []
    including_file = text_access.get_file_path()

    for index, line in enumerate(text_access.get_all_lines()):
        parsed = parse_include_line(line)
        if parsed is None:
            continue
        include_string, uses_brackets = parsed
        # lines are 1 based
        include_directives.append(IncludeDirective(FilePath(include_string), including_file, index + 1, uses_brackets))

    return include_directives


def get_include_directives(file_path: PathLike) -> List[IncludeDirective]:
    """Extract all include directives from a file on disk.

    Args:
        file_path: Source or header file

    Returns:
        Directives in line order; empty if the file does not exist
    """
    path = FilePath.of(file_path)
    if not path.exists():
        logger.debug("Skipping missing file: %s", path)
        return []
    return get_include_directives_from_text(TextAccess.create_from_file(path))

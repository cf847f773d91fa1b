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
"""Compiler command-line arguments built from discovered search directories.

The output is meant for a clang-based frontend (e.g. a clang tooling
FixedCompilationDatabase); this module only builds the argument list and never
runs a compiler.
"""

import logging
from typing import Iterable, List, Sequence

from .constants import ArgumentError, ESSENTIAL_COMPILER_FLAGS, LANGUAGE_ARGUMENTS
from .file_path import FilePath, PathLike

logger = logging.getLogger(__name__)


def _sorted_paths(paths: Iterable[PathLike]) -> List[str]:
    return [str(p) for p in sorted({FilePath.of(p) for p in paths})]


def get_search_path_arguments(
    header_search_paths: Iterable[PathLike],
    system_header_search_paths: Iterable[PathLike] = (),
    framework_search_paths: Iterable[PathLike] = (),
) -> List[str]:
    """Build -I, -isystem and -iframework arguments.

    Args:
        header_search_paths: Project header search directories (-I<dir>)
        system_header_search_paths: System header directories (-isystem <dir>)
        framework_search_paths: Framework directories (-iframework <dir>)

    Returns:
        Argument list; each group in sorted path order
    """
    args: List[str] = []

    for path in _sorted_paths(header_search_paths):
        args.append("-I" + path)

    for path in _sorted_paths(system_header_search_paths):
        args.append("-isystem")
        args.append(path)

    for path in _sorted_paths(framework_search_paths):
        args.append("-iframework")
        args.append(path)

    return args


def get_essential_arguments(
    compiler_flags: Sequence[str],
    header_search_paths: Iterable[PathLike],
    system_header_search_paths: Iterable[PathLike] = (),
    framework_search_paths: Iterable[PathLike] = (),
) -> List[str]:
    """Caller flags, the flags every indexing run needs, then the search path arguments.

    -fno-delayed-template-parsing keeps AST elements for unused template functions,
    -fexceptions enables exception-related analysis and -c prevents linking.
    """
    args = list(compiler_flags)
    args.extend(ESSENTIAL_COMPILER_FLAGS)
    args.extend(get_search_path_arguments(header_search_paths, system_header_search_paths, framework_search_paths))
    return args


def get_language_arguments(language: str, language_standard: str) -> List[str]:
    """Build '-x <lang>' and '-std=<lang><standard>'.

    Args:
        language: 'c++' (aliases 'cpp', 'cxx') or 'c'
        language_standard: Standard suffix, e.g. '17' or '11'

    Returns:
        Argument list

    Raises:
        ArgumentError: If the language is unknown
    """
    normalized = LANGUAGE_ARGUMENTS.get(language.lower())
    if normalized is None:
        raise ArgumentError(f"Unknown language '{language}' (expected one of: {', '.join(sorted(LANGUAGE_ARGUMENTS))})")
    return ["-x", normalized, f"-std={normalized}{language_standard}"]


def get_command_line_arguments(
    compiler_flags: Sequence[str],
    header_search_paths: Iterable[PathLike],
    language: str = "c++",
    language_standard: str = "17",
    system_header_search_paths: Iterable[PathLike] = (),
    framework_search_paths: Iterable[PathLike] = (),
) -> List[str]:
    """Full argument list: essential arguments followed by the language arguments."""
    args = get_essential_arguments(compiler_flags, header_search_paths, system_header_search_paths, framework_search_paths)
    args.extend(get_language_arguments(language, language_standard))
    logger.debug("Compiler arguments: %s", " ".join(args))
    return args

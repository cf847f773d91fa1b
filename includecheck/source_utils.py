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
"""Collection of source files and of the indexed project boundary."""

import os
import json
import logging
from typing import Iterable, List, Optional

from git import Repo, InvalidGitRepositoryError, NoSuchPathError
from git.exc import GitError

from .constants import COMPILE_COMMANDS_JSON, EXCLUDED_SOURCE_DIRS, VALID_SOURCE_EXTENSIONS, SourceFileError, ValidationError
from .file_path import FilePath

logger = logging.getLogger(__name__)


def is_valid_source_file(filepath: str) -> bool:
    """Check if file is a valid C/C++ source file.

    Args:
        filepath: Path to check

    Returns:
        True if the extension is a known source extension
    """
    return filepath.lower().endswith(VALID_SOURCE_EXTENSIONS)


def extract_source_files_from_compile_commands(compile_commands_path: str) -> List[str]:
    """Extract source file paths from compile_commands.json.

    Args:
        compile_commands_path: Path to compile_commands.json

    Returns:
        List of absolute source file paths; empty if the database cannot be read
    """
    source_files = []

    try:
        with open(compile_commands_path, "r", encoding="utf-8") as f:
            compile_commands = json.load(f)

        for entry in compile_commands:
            file_path = entry.get("file", "")
            directory = entry.get("directory", "")

            if file_path and is_valid_source_file(file_path):
                # Resolve relative paths using the directory field
                if not os.path.isabs(file_path) and directory:
                    file_path = os.path.join(directory, file_path)
                source_files.append(os.path.abspath(file_path))

    except (json.JSONDecodeError, IOError, KeyError, AttributeError, TypeError) as e:
        logger.warning("Failed to extract source files from %s: %s", compile_commands_path, e)

    return source_files


def find_source_files_in_directory(directory: str) -> List[str]:
    """Recursively collect source files below a directory, skipping VCS metadata."""
    source_files = []
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_SOURCE_DIRS)
        for filename in sorted(filenames):
            if is_valid_source_file(filename):
                source_files.append(os.path.abspath(os.path.join(dirpath, filename)))
    return source_files


def collect_source_files(paths: Iterable[str]) -> List[FilePath]:
    """Collect source files from files, directories and compilation databases.

    Args:
        paths: Mix of source files, directories and compile_commands.json files

    Returns:
        Sorted unique source files

    Raises:
        SourceFileError: If a path does not exist or nothing was collected
    """
    collected = set()

    for path in paths:
        if not os.path.exists(path):
            raise SourceFileError(f"Source path does not exist: {path}")

        if os.path.isdir(path):
            found = find_source_files_in_directory(path)
            logger.debug("Found %s source files in %s", len(found), path)
        elif os.path.basename(path) == COMPILE_COMMANDS_JSON or path.endswith(".json"):
            found = extract_source_files_from_compile_commands(path)
            logger.debug("Found %s source files in %s", len(found), path)
        else:
            found = [os.path.abspath(path)]

        collected.update(found)

    if not collected:
        raise SourceFileError("No source files found")

    logger.info("Collected %s source files", len(collected))
    return sorted(FilePath(p) for p in collected)


def find_project_root_from_sources(source_files: Iterable[str]) -> str:
    """Find project root by finding the common directory of all source file paths.

    Args:
        source_files: Source file paths

    Returns:
        Common project root directory path
    """
    abs_paths = [os.path.realpath(str(f)) for f in source_files]
    if not abs_paths:
        return os.sep

    if len(abs_paths) == 1:
        return os.path.dirname(abs_paths[0])

    common_prefix = os.path.commonpath(abs_paths)

    # Ensure it's a directory
    if os.path.isfile(common_prefix):
        common_prefix = os.path.dirname(common_prefix)

    return common_prefix


def find_git_repo(start_path: str) -> Optional[str]:
    """Find the git repository root by searching upward from start_path.

    Args:
        start_path: Directory to start searching from

    Returns:
        Absolute path to git repository root, or None if not found
    """
    try:
        repo = Repo(start_path, search_parent_directories=True)
        repo_root = repo.working_tree_dir
        if repo_root is not None:
            logger.debug("Found git repository at: %s", repo_root)
            return str(repo_root)
    except (InvalidGitRepositoryError, NoSuchPathError, GitError):
        pass
    return None


def get_default_indexed_paths(source_files: Iterable[str]) -> List[FilePath]:
    """Indexed boundary used when none is given: the enclosing git repository, else the common source directory.

    Args:
        source_files: Source file paths

    Returns:
        Single-element list with the boundary directory
    """
    project_root = find_project_root_from_sources(source_files)
    repo_root = find_git_repo(project_root)
    if repo_root is not None:
        logger.info("Using git repository root as indexed path: %s", repo_root)
        return [FilePath(repo_root).make_canonical()]

    logger.info("Using common source directory as indexed path: %s", project_root)
    return [FilePath(project_root)]


def validate_directories(paths: Iterable[str], description: str) -> List[FilePath]:
    """Check that every path is an existing directory.

    Args:
        paths: Directory paths from the command line
        description: What the directories are, for the error message (e.g. "Include directory")

    Returns:
        Absolute FilePath for each directory

    Raises:
        ValidationError: If a path is not a directory
    """
    directories = []
    for path in paths:
        if not os.path.isdir(path):
            raise ValidationError(f"{description} is not a directory: {path}")
        directories.append(FilePath(os.path.abspath(path)))
    return directories

#!/usr/bin/env python3
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#*
#* Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
#*
#* 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
#* 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
#*    documentation and/or other materials provided with the distribution.
#* 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
#*    software without specific prior written permission.
#*
#* THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
#* THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
#* CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
#* PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
#* LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
#* EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#****************************************************************************************************************************************************
"""Pytest configuration and shared base fixtures for includeCheck tests.

Fixtures:
- temp_dir: isolated temporary directory (str)
- write_tree: helper that writes a {relative_path: content} mapping below a root
- cpp_project: small C++ project with sources, headers, an include cycle and a third-party tree
- mock_git_repo: git repository with one committed source file, repo/src/main.cpp
- progress_recorder: progress callback that records every reported value

InMemoryFileTree is a FileTree fake for tests that must not scan the disk.
"""

import os
import sys
import shutil
import tempfile
import subprocess
from pathlib import Path
from typing import Callable, Dict, Generator, Iterable, List

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from includecheck.file_path import FilePath, PathLike
from includecheck.file_tree import FileTree, split_relative_path


class InMemoryFileTree(FileTree):
    """FileTree fake answering lookups from a fixed {relative_path: [roots]} mapping."""

    def __init__(self, mapping: Dict[str, Iterable[str]]):
        self._mapping = {split_relative_path(k): sorted(FilePath(r) for r in v) for k, v in mapping.items()}
        self.lookups: List[str] = []

    def get_absolute_root_paths_for_relative_file_path(self, relative_path: PathLike) -> List[FilePath]:
        self.lookups.append(str(relative_path))
        return list(self._mapping.get(split_relative_path(relative_path), []))


class ProgressRecorder:
    """Progress callback that records every value."""

    def __init__(self) -> None:
        self.values: List[float] = []

    def __call__(self, value: float) -> None:
        self.values.append(value)


def write_files(root: str, files: Dict[str, str]) -> Dict[str, str]:
    """Write files below root and return {relative_path: absolute_path}."""
    written = {}
    for relative_path, content in files.items():
        path = Path(root) / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        written[relative_path] = str(path)
    return written


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    The path is canonical so that results of realpath() compare equal to it.
    """
    tmpdir = os.path.realpath(tempfile.mkdtemp(prefix="includecheck_test_"))
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def write_tree() -> Callable[[str, Dict[str, str]], Dict[str, str]]:
    return write_files


@pytest.fixture
def progress_recorder() -> ProgressRecorder:
    return ProgressRecorder()


@pytest.fixture
def cpp_project(temp_dir: str) -> str:
    """Create a small C++ project.

    Layout:
        project/src/main.cpp       includes "core.h", <util/strings.h>, <vector>, "lib/api.h"
        project/src/core.h         includes "cycle_a.h"
        project/src/cycle_a.h      includes "cycle_b.h"
        project/src/cycle_b.h      includes "cycle_a.h"
        project/include/util/strings.h
        project/other.cpp          includes "missing/other.h"
        external/vendor/lib/api.h  includes "detail/impl.h", <not_there.h>
        external/vendor/lib/detail/impl.h
    """
    write_files(
        temp_dir,
        {
            "project/src/main.cpp": '#include "core.h"\n#include <util/strings.h>\n#include <vector>\n#include "lib/api.h"\n\nint main() { return 0; }\n',
            "project/src/core.h": '#pragma once\n#include "cycle_a.h"\n',
            "project/src/cycle_a.h": '#pragma once\n#include "cycle_b.h"\n',
            "project/src/cycle_b.h": '#pragma once\n#include "cycle_a.h"\n',
            "project/include/util/strings.h": "#pragma once\n",
            "project/other.cpp": '#include "missing/other.h"\n',
            "external/vendor/lib/api.h": '#pragma once\n#include "detail/impl.h"\n#include <not_there.h>\n',
            "external/vendor/lib/detail/impl.h": "#pragma once\n",
        },
    )
    return temp_dir


@pytest.fixture
def mock_git_repo(temp_dir: str) -> Generator[str, None, None]:
    """Create a git repository containing one source file in a subdirectory.

    Requires: git command available
    """
    repo_dir = os.path.join(temp_dir, "repo")
    write_files(repo_dir, {"src/main.cpp": "int main() { return 0; }\n"})

    try:
        subprocess.run(["git", "init"], cwd=repo_dir, check=True, capture_output=True)
        subprocess.run(["git", "config", "user.email", "test@example.com"], cwd=repo_dir, check=True, capture_output=True)
        subprocess.run(["git", "config", "user.name", "Test User"], cwd=repo_dir, check=True, capture_output=True)
        subprocess.run(["git", "add", "."], cwd=repo_dir, check=True, capture_output=True)
        subprocess.run(["git", "commit", "-m", "Initial commit"], cwd=repo_dir, check=True, capture_output=True)
    except (subprocess.CalledProcessError, FileNotFoundError):
        pytest.skip("git not available")

    yield repo_dir

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
"""Include resolution, header search directory discovery and unresolved include detection.

Both walks are breadth first over the include graph, starting from the source
files. A per-call memo of canonical paths guarantees that every file is scanned
at most once, so include cycles terminate. The source files are split into
round-robin quantiles that are processed one after another; progress is
reported at each quantile boundary and always ends with exactly 1.0.

All state (memo, results) lives inside one call. Nothing is cached at module level.
"""

import os
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set

from .constants import ArgumentError, MIN_QUANTILE_COUNT
from .file_path import FilePath, PathLike
from .file_tree import FileSystemFileTree, FileTree
from .graph_utils import add_include_edge
from .include_directive import IncludeDirective, get_include_directives

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def _report(progress: Optional[ProgressCallback], value: float) -> None:
    if progress is not None:
        progress(value)


def _to_file_paths(paths: Iterable[PathLike]) -> Set[FilePath]:
    return {FilePath.of(p) for p in paths}


def split_to_quantiles(source_file_paths: Iterable[PathLike], desired_quantile_count: int) -> List[List[FilePath]]:
    """Split source files into round-robin quantiles.

    Files are taken in sorted order and dealt out by index modulo the quantile
    count, so neighbouring files of one large subtree land in different quantiles.

    Args:
        source_file_paths: Source files to split (duplicates collapse)
        desired_quantile_count: Requested number of quantiles

    Returns:
        max(1, min(desired_quantile_count, len(files))) lists of files
    """
    files = sorted(_to_file_paths(source_file_paths))
    quantile_count = max(1, min(desired_quantile_count, len(files)))

    quantiles: List[List[FilePath]] = [[] for _ in range(quantile_count)]
    for i, source_file_path in enumerate(files):
        quantiles[i % quantile_count].append(source_file_path)

    return quantiles


def _claim_unprocessed(file_paths: Iterable[FilePath], processed_file_paths: Set[str]) -> List[FilePath]:
    """Mark file_paths as processed and return those not seen before, one per canonical path, in sorted order."""
    claimed = []
    for file_path in sorted(file_paths):
        canonical_path = file_path.make_canonical().path
        if canonical_path not in processed_file_paths:
            processed_file_paths.add(canonical_path)
            claimed.append(file_path)
    return claimed


def _canonical_directory_prefixes(directories: Iterable[PathLike]) -> List[str]:
    """Canonical directory strings ending in a separator, ready for prefix tests against canonical paths."""
    prefixes = []
    for directory in sorted(_to_file_paths(directories)):
        if directory.is_empty():
            continue
        canonical_directory = directory.make_canonical().path
        prefixes.append(canonical_directory if canonical_directory.endswith(os.sep) else canonical_directory + os.sep)
    return prefixes


def _is_indexed(canonical_path: str, indexed_prefixes: List[str]) -> bool:
    # "/src/lib/x.h" is below "/src/lib/", "/src/library/x.h" is not
    candidate = canonical_path + os.sep
    return any(candidate.startswith(prefix) for prefix in indexed_prefixes)


def _validate_quantile_count(desired_quantile_count: int) -> None:
    if desired_quantile_count < MIN_QUANTILE_COUNT:
        raise ArgumentError(f"Quantile count must be at least {MIN_QUANTILE_COUNT}, got {desired_quantile_count}")


def resolve_include_directive(include_directive: IncludeDirective, header_search_directories: Iterable[PathLike]) -> Optional[FilePath]:
    """Resolve an include directive to a file on disk.

    Precedence (first existing candidate wins):
    1. The included path itself, when it is absolute
    2. Relative to the directory of the including file (for both <...> and "..." forms)
    3. Relative to each header search directory, in sorted order

    Only existence is checked; file content is never read.

    Args:
        include_directive: Directive to resolve
        header_search_directories: Known header search directories

    Returns:
        Resolved path (not canonicalized), or None if nothing matches
    """
    return _resolve_include_directive(include_directive, sorted(_to_file_paths(header_search_directories)))


def _resolve_include_directive(include_directive: IncludeDirective, sorted_header_search_directories: Sequence[FilePath]) -> Optional[FilePath]:
    included_file_path = include_directive.included_file

    # check for an absolute include path
    if included_file_path.is_absolute() and included_file_path.exists():
        return included_file_path

    # check for an include path relative to the including path
    resolved_include_path = include_directive.including_file.get_parent_directory().concatenate(included_file_path)
    if resolved_include_path.exists():
        return resolved_include_path

    # check for an include path relative to the header search directories
    for header_search_directory in sorted_header_search_directories:
        resolved_include_path = header_search_directory.concatenate(included_file_path)
        if resolved_include_path.exists():
            return resolved_include_path

    return None


def _resolve_with_file_trees(
    include_directive: IncludeDirective, file_trees: Sequence[FileTree], header_search_directories: Set[FilePath]
) -> Optional[FilePath]:
    """Resolve an include through the snapshots, recording the matching root as a new search directory."""
    included_file_path = include_directive.included_file

    for file_tree in file_trees:
        root_paths = file_tree.get_absolute_root_paths_for_relative_file_path(included_file_path)
        for root_path in root_paths:
            found_include_path = root_path.concatenate(included_file_path)
            if found_include_path.exists():
                if len(root_paths) > 1:
                    logger.debug("Include %s found below %s roots, using %s", included_file_path, len(root_paths), root_path)
                if root_path not in header_search_directories:
                    logger.debug("Discovered header search directory %s (via %s)", root_path, include_directive.format_location())
                header_search_directories.add(root_path)
                return found_include_path

    return None


def get_header_search_directories(
    source_file_paths: Iterable[PathLike],
    searched_paths: Iterable[PathLike],
    current_header_search_directories: Iterable[PathLike],
    desired_quantile_count: int = 1,
    progress: Optional[ProgressCallback] = None,
    file_trees: Optional[Sequence[FileTree]] = None,
    include_graph: Optional[Any] = None,
) -> Set[FilePath]:
    """Discover header search directories needed to resolve the includes of the source files.

    Walks the include graph breadth first. An include that no known directory
    resolves is looked up in the snapshots of the searched paths; the first
    snapshot root under which it exists becomes a discovered search directory.

    Args:
        source_file_paths: Source files to start from
        searched_paths: Directories to snapshot for inference
        current_header_search_directories: Already known header search directories
        desired_quantile_count: Number of quantiles for progress granularity
        progress: Callback receiving values in [0.0, 1.0]
        file_trees: Ready-made snapshots to use instead of scanning searched_paths
        include_graph: Optional networkx DiGraph that receives the walked include edges

    Returns:
        Discovered header search directories (known directories are not repeated unless rediscovered)

    Raises:
        ArgumentError: If desired_quantile_count is below 1
    """
    _validate_quantile_count(desired_quantile_count)
    _report(progress, 0.0)

    start_time = time.time()
    if file_trees is None:
        file_trees = [FileSystemFileTree(searched_path) for searched_path in sorted(_to_file_paths(searched_paths))]
    known_directories = sorted(_to_file_paths(current_header_search_directories))

    header_search_directories: Set[FilePath] = set()
    processed_file_paths: Set[str] = set()
    quantiles = split_to_quantiles(source_file_paths, desired_quantile_count)

    for i, quantile in enumerate(quantiles):
        _report(progress, i / len(quantiles))

        unprocessed_file_paths = _claim_unprocessed((p.get_absolute() for p in quantile), processed_file_paths)

        while unprocessed_file_paths:
            unprocessed_file_paths_for_next_iteration: Set[FilePath] = set()

            for unprocessed_file_path in unprocessed_file_paths:
                including_path = unprocessed_file_path.make_canonical().path
                for include_directive in get_include_directives(unprocessed_file_path):
                    found_include_path = _resolve_include_directive(include_directive, known_directories)
                    if found_include_path is None:
                        found_include_path = _resolve_with_file_trees(include_directive, file_trees, header_search_directories)

                    if found_include_path is None:
                        add_include_edge(include_graph, including_path, str(include_directive.included_file), include_directive.line_number, False)
                        continue

                    canonical_include_path = found_include_path.make_canonical()
                    add_include_edge(include_graph, including_path, canonical_include_path.path, include_directive.line_number)
                    if canonical_include_path.path not in processed_file_paths:
                        unprocessed_file_paths_for_next_iteration.add(canonical_include_path)

            unprocessed_file_paths = _claim_unprocessed(unprocessed_file_paths_for_next_iteration, processed_file_paths)

    _report(progress, 1.0)

    logger.info(
        "Discovered %s header search directories from %s files in %.2fs",
        len(header_search_directories),
        len(processed_file_paths),
        time.time() - start_time,
    )
    return header_search_directories


def _get_unresolved_include_directives_of_quantile(
    source_file_paths: Iterable[FilePath],
    processed_file_paths: Set[str],
    indexed_prefixes: List[str],
    header_search_directories: List[FilePath],
    include_graph: Optional[Any],
) -> List[IncludeDirective]:
    """Walk one quantile, sharing processed_file_paths with the other quantiles of the call."""
    unresolved_include_directives: List[IncludeDirective] = []
    file_paths_to_process = _claim_unprocessed(source_file_paths, processed_file_paths)

    while file_paths_to_process:
        file_paths_to_process_for_next_iteration: Set[FilePath] = set()

        for file_path in file_paths_to_process:
            including_path = file_path.make_canonical().path
            for include_directive in get_include_directives(file_path):
                resolved_include_path = _resolve_include_directive(include_directive, header_search_directories)
                if resolved_include_path is None:
                    unresolved_include_directives.append(include_directive)
                    add_include_edge(include_graph, including_path, str(include_directive.included_file), include_directive.line_number, False)
                    continue

                resolved_include_path = resolved_include_path.make_canonical()
                add_include_edge(include_graph, including_path, resolved_include_path.path, include_directive.line_number)

                if resolved_include_path.path in processed_file_paths:
                    continue

                # files outside the indexed paths are resolved leaves, their includes are not followed
                if _is_indexed(resolved_include_path.path, indexed_prefixes):
                    file_paths_to_process_for_next_iteration.add(resolved_include_path)

        file_paths_to_process = _claim_unprocessed(file_paths_to_process_for_next_iteration, processed_file_paths)

    return unresolved_include_directives


def get_unresolved_include_directives(
    source_file_paths: Iterable[PathLike],
    indexed_paths: Iterable[PathLike],
    header_search_directories: Iterable[PathLike],
    desired_quantile_count: int = 1,
    progress: Optional[ProgressCallback] = None,
    include_graph: Optional[Any] = None,
) -> List[IncludeDirective]:
    """Find every include directive that cannot be resolved.

    Walks the include graph breadth first using only the given header search
    directories. Includes that resolve to files outside all indexed paths are
    not expanded, so third-party and system headers act as leaves.

    When several directives share the same included path, only the first one
    collected is kept.

    Args:
        source_file_paths: Source files to start from
        indexed_paths: Directories that belong to the project
        header_search_directories: Known header search directories
        desired_quantile_count: Number of quantiles for progress granularity
        progress: Callback receiving values in [0.0, 1.0]
        include_graph: Optional networkx DiGraph that receives the walked include edges

    Returns:
        Unresolved directives sorted by included path

    Raises:
        ArgumentError: If desired_quantile_count is below 1
    """
    _validate_quantile_count(desired_quantile_count)

    start_time = time.time()
    indexed_prefixes = _canonical_directory_prefixes(indexed_paths)
    search_directories = sorted(_to_file_paths(header_search_directories))

    processed_file_paths: Set[str] = set()
    unresolved_include_directives: Dict[FilePath, IncludeDirective] = {}

    quantiles = split_to_quantiles(source_file_paths, desired_quantile_count)

    for i, quantile in enumerate(quantiles):
        _report(progress, i / len(quantiles))

        directives = _get_unresolved_include_directives_of_quantile(
            (p.get_absolute() for p in quantile), processed_file_paths, indexed_prefixes, search_directories, include_graph
        )
        for directive in directives:
            unresolved_include_directives.setdefault(directive.sort_key(), directive)

    result = [unresolved_include_directives[key] for key in sorted(unresolved_include_directives)]

    _report(progress, 1.0)

    logger.info(
        "Found %s unresolved include directives in %s files in %.2fs", len(result), len(processed_file_paths), time.time() - start_time
    )
    return result

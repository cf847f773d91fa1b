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
"""Export utilities for writing include analysis results to various file formats."""

import os
import csv
import json
import logging
from typing import Any, Iterable, List, Optional

import networkx as nx
from networkx.readwrite import json_graph

from .color_utils import print_success
from .constants import DEFAULT_GRAPH_FORMAT, SUPPORTED_GRAPH_FORMATS, AnalysisError
from .file_path import FilePath, PathLike
from .include_directive import IncludeDirective

logger = logging.getLogger(__name__)

UNRESOLVED_FIELDS = ["included_file", "including_file", "line_number", "uses_angle_brackets"]


def format_unresolved_directive(directive: IncludeDirective, project_root: Optional[str] = None) -> str:
    """Render a diagnostic line for an unresolved include.

    Args:
        directive: Unresolved include directive
        project_root: Root used to shorten the including file path

    Returns:
        String like 'src/a.cpp:3: cannot resolve include <missing.h>'
    """
    return f"{directive.format_location(project_root)}: cannot resolve include {directive.format_include()}"


def directive_to_dict(directive: IncludeDirective) -> dict:
    return {
        "included_file": str(directive.included_file),
        "including_file": str(directive.including_file),
        "line_number": directive.line_number,
        "uses_angle_brackets": directive.uses_angle_brackets,
    }


def export_unresolved_to_json(filename: str, directives: Iterable[IncludeDirective]) -> None:
    """Export unresolved include directives to a JSON file.

    Args:
        filename: Output JSON filename
        directives: Unresolved directives

    Raises:
        AnalysisError: If the file cannot be written
    """
    entries = [directive_to_dict(d) for d in directives]
    try:
        with open(filename, "w", encoding="utf-8") as f:
            json.dump({"unresolved_includes": entries, "count": len(entries)}, f, indent=2)
    except (IOError, OSError) as e:
        raise AnalysisError(f"Failed to export JSON to {filename}: {e}") from e

    logger.info("Exported %s unresolved includes to %s", len(entries), filename)
    print_success(f"Exported unresolved includes to {filename}")


def export_unresolved_to_csv(filename: str, directives: Iterable[IncludeDirective]) -> None:
    """Export unresolved include directives to a CSV file, one row per directive.

    Raises:
        AnalysisError: If the file cannot be written
    """
    try:
        with open(filename, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=UNRESOLVED_FIELDS)
            writer.writeheader()
            for directive in directives:
                writer.writerow(directive_to_dict(directive))
    except (IOError, OSError) as e:
        raise AnalysisError(f"Failed to export CSV to {filename}: {e}") from e

    logger.info("Exported unresolved includes to %s", filename)
    print_success(f"Exported unresolved includes to {filename}")


def export_search_directories(filename: str, directories: Iterable[PathLike]) -> None:
    """Write one header search directory per line, sorted.

    Raises:
        AnalysisError: If the file cannot be written
    """
    lines = [str(p) for p in sorted({FilePath.of(p) for p in directories})]
    try:
        with open(filename, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
    except (IOError, OSError) as e:
        raise AnalysisError(f"Failed to write search directories to {filename}: {e}") from e

    logger.info("Wrote %s header search directories to %s", len(lines), filename)
    print_success(f"Wrote header search directories to {filename}")


def export_include_graph(filename: str, graph: "nx.DiGraph[Any]", project_root: Optional[str] = None) -> str:
    """Export the include graph.

    Supports: GraphML (.graphml), GEXF (.gexf), JSON (.json, node-link format).
    Any other extension falls back to GraphML with '.graphml' appended.

    Node attributes:
        - label: File basename (or the include spelling when unresolved)
        - path: Path relative to project_root when inside it
        - resolved: Whether the node is a file on disk

    Args:
        filename: Output filename (extension determines format)
        graph: Include graph collected by the include walks
        project_root: Root directory used for relative 'path' attributes

    Returns:
        Name of the file actually written

    Raises:
        AnalysisError: If writing fails
    """
    ext = os.path.splitext(filename)[1].lower()
    if ext not in SUPPORTED_GRAPH_FORMATS:
        logger.warning("Unsupported graph format: %s. Defaulting to GraphML.", ext)
        ext = "." + DEFAULT_GRAPH_FORMAT
        filename = filename + ext

    G = graph.copy()

    for node in G.nodes():
        resolved = bool(G.nodes[node].get("resolved", True))
        rel_path = node
        if resolved and project_root and FilePath(project_root).contains(node):
            rel_path = os.path.relpath(node, FilePath(project_root).make_canonical().path)
        G.nodes[node]["label"] = os.path.basename(node) if resolved else node
        G.nodes[node]["path"] = rel_path
        G.nodes[node]["resolved"] = resolved

    try:
        if ext == ".graphml":
            nx.write_graphml(G, filename)
        elif ext == ".gexf":
            nx.write_gexf(G, filename)
        else:
            data = json_graph.node_link_data(G)
            with open(filename, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
    except (IOError, OSError) as e:
        raise AnalysisError(f"Failed to export include graph to {filename}: {e}") from e

    logger.info("Exported include graph with %s nodes to %s", G.number_of_nodes(), filename)
    print_success(f"Exported include graph to {filename}")
    return filename


def load_search_directories(filename: str) -> List[FilePath]:
    """Read a file written by export_search_directories, ignoring blank and '#' comment lines."""
    directories = []
    try:
        with open(filename, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    directories.append(FilePath(line))
    except (IOError, OSError) as e:
        raise AnalysisError(f"Failed to read search directories from {filename}: {e}") from e
    return directories

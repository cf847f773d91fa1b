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
"""NetworkX helpers for recording and analysing the include graph walked by include processing."""

import logging
from typing import Any, List, Optional, Set, Tuple

import networkx as nx

logger = logging.getLogger(__name__)


def create_include_graph() -> "nx.DiGraph[Any]":
    """Create an empty include graph (nodes are path strings, edges point from includer to included)."""
    G: nx.DiGraph[str] = nx.DiGraph()
    return G


def add_include_edge(
    graph: Optional["nx.DiGraph[Any]"], including_file: str, included_file: str, line_number: int, resolved: bool = True
) -> None:
    """Record one include in the graph, if a graph is being collected.

    Args:
        graph: Graph to update, or None to do nothing
        including_file: Canonical path of the including file
        included_file: Canonical resolved path, or the spelling as written when unresolved
        line_number: Line of the directive in the including file
        resolved: Whether the include resolved to a file on disk
    """
    if graph is None:
        return

    if not graph.has_node(including_file):
        graph.add_node(including_file, resolved=True)
    if not graph.has_node(included_file):
        graph.add_node(included_file, resolved=resolved)
    if not graph.has_edge(including_file, included_file):
        graph.add_edge(including_file, included_file, line=line_number, resolved=resolved)


def find_include_cycles(graph: "nx.DiGraph[Any]") -> Tuple[List[Set[str]], List[str]]:
    """Find include cycles and self-includes among resolved files.

    Args:
        graph: Include graph

    Returns:
        Tuple of (cycles, self_loops) where:
        - cycles: List of sets containing files in multi-file cycles, largest first
        - self_loops: Files that include themselves
    """
    resolved_nodes = [node for node, data in graph.nodes(data=True) if data.get("resolved", True)]
    subgraph = graph.subgraph(resolved_nodes)

    cycles = []
    self_loops = []
    for scc in nx.strongly_connected_components(subgraph):
        if len(scc) > 1:
            cycles.append(set(scc))
        elif len(scc) == 1:
            node = next(iter(scc))
            if subgraph.has_edge(node, node):
                self_loops.append(node)

    cycles.sort(key=lambda c: (-len(c), sorted(c)))
    logger.debug("Found %s include cycles and %s self-includes", len(cycles), len(self_loops))
    return cycles, sorted(self_loops)

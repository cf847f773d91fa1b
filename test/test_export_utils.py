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
"""Tests for includecheck/export_utils.py"""

import os
import csv
import json
from pathlib import Path
from typing import Any, List

import networkx as nx
import pytest

from includecheck.constants import AnalysisError
from includecheck.export_utils import (
    export_include_graph,
    export_search_directories,
    export_unresolved_to_csv,
    export_unresolved_to_json,
    format_unresolved_directive,
    load_search_directories,
)
from includecheck.file_path import FilePath
from includecheck.graph_utils import add_include_edge, create_include_graph
from includecheck.include_directive import IncludeDirective


@pytest.fixture
def unresolved(temp_dir: str) -> List[IncludeDirective]:
    return [
        IncludeDirective(FilePath("missing.h"), FilePath(os.path.join(temp_dir, "src", "b.h")), 1, True),
        IncludeDirective(FilePath("vector"), FilePath(os.path.join(temp_dir, "src", "a.cpp")), 3, False),
    ]


@pytest.fixture
def include_graph(temp_dir: str) -> Any:
    graph = create_include_graph()
    a_cpp = os.path.join(temp_dir, "src", "a.cpp")
    b_h = os.path.join(temp_dir, "src", "b.h")
    add_include_edge(graph, a_cpp, b_h, 2)
    add_include_edge(graph, b_h, "missing.h", 1, resolved=False)
    return graph


class TestFormatUnresolvedDirective:
    """Tests for format_unresolved_directive function."""

    def test_absolute_location(self) -> None:
        """Test the diagnostic line without a project root."""
        directive = IncludeDirective(FilePath("missing.h"), FilePath("/p/src/a.cpp"), 3, True)
        assert format_unresolved_directive(directive) == "/p/src/a.cpp:3: cannot resolve include <missing.h>"

    def test_relative_location(self, unresolved: List[IncludeDirective], temp_dir: str) -> None:
        """Test the including file is shown relative to the project root."""
        line = format_unresolved_directive(unresolved[1], temp_dir)
        assert line == f'{os.path.join("src", "a.cpp")}:3: cannot resolve include "vector"'


class TestExportUnresolved:
    """Tests for JSON and CSV export of unresolved directives."""

    def test_json_export(self, unresolved: List[IncludeDirective], temp_dir: str, capsys: Any) -> None:
        """Test JSON export contains every directive and a count."""
        output_file = Path(temp_dir) / "unresolved.json"
        export_unresolved_to_json(str(output_file), unresolved)

        data = json.loads(output_file.read_text())
        assert data["count"] == 2
        assert data["unresolved_includes"][0] == {
            "included_file": "missing.h",
            "including_file": os.path.join(temp_dir, "src", "b.h"),
            "line_number": 1,
            "uses_angle_brackets": True,
        }
        assert "Exported unresolved includes" in capsys.readouterr().out

    def test_json_export_empty(self, temp_dir: str) -> None:
        """Test an empty result still writes a valid document."""
        output_file = Path(temp_dir) / "empty.json"
        export_unresolved_to_json(str(output_file), [])

        assert json.loads(output_file.read_text()) == {"unresolved_includes": [], "count": 0}

    def test_csv_export(self, unresolved: List[IncludeDirective], temp_dir: str) -> None:
        """Test CSV export has a header row and one row per directive."""
        output_file = Path(temp_dir) / "unresolved.csv"
        export_unresolved_to_csv(str(output_file), unresolved)

        with open(output_file, "r", newline="") as f:
            rows = list(csv.DictReader(f))

        assert len(rows) == 2
        assert rows[1]["included_file"] == "vector"
        assert rows[1]["line_number"] == "3"
        assert rows[1]["uses_angle_brackets"] == "False"

    def test_unwritable_target(self, unresolved: List[IncludeDirective], temp_dir: str) -> None:
        """Test write failures become AnalysisError."""
        with pytest.raises(AnalysisError):
            export_unresolved_to_json(os.path.join(temp_dir, "no", "such", "dir.json"), unresolved)


class TestSearchDirectoriesFile:
    """Tests for writing and reading search directory lists."""

    def test_written_sorted_and_unique(self, temp_dir: str) -> None:
        """Test directories are written once each, sorted."""
        output_file = Path(temp_dir) / "dirs.txt"
        export_search_directories(str(output_file), ["/b", FilePath("/a"), "/b"])

        assert output_file.read_text() == "/a\n/b\n"

    def test_load_skips_comments_and_blank_lines(self, temp_dir: str) -> None:
        """Test comments and blank lines are ignored when reading."""
        input_file = Path(temp_dir) / "dirs.txt"
        input_file.write_text("# discovered\n/a\n\n  /b  \n")

        assert load_search_directories(str(input_file)) == [FilePath("/a"), FilePath("/b")]

    def test_load_missing_file(self, temp_dir: str) -> None:
        """Test a missing list raises AnalysisError."""
        with pytest.raises(AnalysisError):
            load_search_directories(os.path.join(temp_dir, "missing.txt"))


class TestExportIncludeGraph:
    """Tests for export_include_graph function."""

    def test_graphml_export(self, include_graph: Any, temp_dir: str) -> None:
        """Test GraphML export with relative paths and labels."""
        output_file = os.path.join(temp_dir, "graph.graphml")
        written = export_include_graph(output_file, include_graph, temp_dir)

        assert written == output_file
        loaded = nx.read_graphml(output_file)
        b_h = os.path.join(temp_dir, "src", "b.h")
        assert loaded.nodes[b_h]["label"] == "b.h"
        assert loaded.nodes[b_h]["path"] == os.path.join("src", "b.h")
        assert loaded.nodes["missing.h"]["resolved"] is False

    def test_gexf_export(self, include_graph: Any, temp_dir: str) -> None:
        """Test GEXF export creates the file."""
        output_file = os.path.join(temp_dir, "graph.gexf")
        export_include_graph(output_file, include_graph)
        assert os.path.exists(output_file)

    def test_json_export(self, include_graph: Any, temp_dir: str) -> None:
        """Test node-link JSON export."""
        output_file = os.path.join(temp_dir, "graph.json")
        export_include_graph(output_file, include_graph, temp_dir)

        with open(output_file, "r") as f:
            data = json.load(f)
        assert {node["id"] for node in data["nodes"]} == {
            os.path.join(temp_dir, "src", "a.cpp"),
            os.path.join(temp_dir, "src", "b.h"),
            "missing.h",
        }

    def test_unknown_extension_falls_back_to_graphml(self, include_graph: Any, temp_dir: str) -> None:
        """Test an unsupported extension writes GraphML next to it."""
        output_file = os.path.join(temp_dir, "graph.dot")
        written = export_include_graph(output_file, include_graph)

        assert written == output_file + ".graphml"
        assert os.path.exists(written)

    def test_input_graph_is_not_modified(self, include_graph: Any, temp_dir: str) -> None:
        """Test export attributes are set on a copy."""
        export_include_graph(os.path.join(temp_dir, "graph.graphml"), include_graph, temp_dir)

        for _, data in include_graph.nodes(data=True):
            assert "label" not in data

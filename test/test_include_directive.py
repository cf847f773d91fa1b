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
"""Unit tests for include directive extraction and text access.

Covers the lexical rules: a directive is a trimmed line starting with '#',
followed (after trimming) by 'include', with a non-empty <...> or "..." argument.
"""

import os
from pathlib import Path
from typing import Any, Dict

import pytest

from includecheck.file_path import FilePath
from includecheck.include_directive import (
    IncludeDirective,
    get_include_directives,
    get_include_directives_from_text,
    parse_include_line,
)
from includecheck.text_access import TextAccess


def _directives(text: str, path: str = "/project/a.cpp") -> Any:
    return get_include_directives_from_text(TextAccess.create_from_string(text, path))


class TestParseIncludeLine:
    """Test single-line parsing."""

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("#include <vector>", ("vector", True)),
            ('#include "my_header.h"', ("my_header.h", False)),
            ("   #   include   <sys/types.h>   ", ("sys/types.h", True)),
            ("\t#include\t\"tab.h\"", ("tab.h", False)),
            ("#include_next <stdlib.h>", ("stdlib.h", True)),
            ('#include "x.h" // trailing comment', ("x.h", False)),
        ],
    )
    def test_recognized_directives(self, line: str, expected: Any) -> None:
        """Test recognized directives."""
        assert parse_include_line(line) == expected

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "int main() {}",
            "#define X 1",
            "#pragma once",
            "#include",
            "#include <>",
            '#include ""',
            "#include MACRO_HEADER",
            "// #include missing hash first",
            "#import_x <a.h>",
        ],
    )
    def test_rejected_lines(self, line: str) -> None:
        """Test rejected lines."""
        assert parse_include_line(line) is None

    def test_angle_brackets_take_precedence_over_quotes(self) -> None:
        """Test angle brackets take precedence over quotes."""
        assert parse_include_line('#include "a<b>.h"') == ("b", True)

    def test_unterminated_angle_falls_back_to_quotes(self) -> None:
        """Test unterminated angle falls back to quotes."""
        assert parse_include_line('#include "a.h" <') == ("a.h", False)

    def test_commented_out_block_include_is_still_reported(self) -> None:
        """Test commented out block include is still reported."""
        # lexical scan does not understand comments that start before the '#'
        assert parse_include_line("#include <old.h> /* disabled */") == ("old.h", True)


class TestGetIncludeDirectivesFromText:
    """Test extraction over whole texts."""

    def test_line_numbers_are_one_based_physical_lines(self) -> None:
        """Test line numbers are one based physical lines."""
        text = "#include <vector>\n\n// comment\n#include \"b.h\"\n"
        directives = _directives(text)

        assert [(str(d.included_file), d.line_number, d.uses_angle_brackets) for d in directives] == [
            ("vector", 1, True),
            ("b.h", 4, False),
        ]

    def test_including_file_is_text_origin(self) -> None:
        """Test including file is text origin."""
        directives = _directives('#include "b.h"\n', "/project/src/a.cpp")
        assert directives[0].including_file == FilePath("/project/src/a.cpp")

    def test_conditional_includes_are_not_evaluated(self) -> None:
        """Test conditional includes are not evaluated."""
        text = "#ifdef _WIN32\n#include <windows.h>\n#else\n#include <unistd.h>\n#endif\n"
        assert [str(d.included_file) for d in _directives(text)] == ["windows.h", "unistd.h"]

    def test_empty_text(self) -> None:
        """Test empty text."""
        assert _directives("") == []

    def test_crlf_line_endings(self) -> None:
        """Test crlf line endings."""
        directives = _directives('#include "a.h"\r\n#include "b.h"\r\n')
        assert [(str(d.included_file), d.line_number) for d in directives] == [("a.h", 1), ("b.h", 2)]

    def test_form_feed_and_unicode_separators_stay_on_their_line(self) -> None:
        """Test form feeds, vertical tabs and U+2028 do not shift physical line numbers."""
        directives = _directives("int x;\n\f\n#include <a.h>\n// caf\u2028e \v\x85\n#include \"b.h\"\n")
        assert [(str(d.included_file), d.line_number) for d in directives] == [("a.h", 3), ("b.h", 5)]

    def test_last_line_without_newline(self) -> None:
        """Test a final line without a terminating newline is still read."""
        assert [d.line_number for d in _directives("int x;\n#include <a.h>")] == [2]


class TestGetIncludeDirectives:
    """Test extraction from files on disk."""

    def test_missing_file_returns_empty(self, temp_dir: str) -> None:
        """Test missing file returns empty."""
        assert get_include_directives(os.path.join(temp_dir, "missing.cpp")) == []

    def test_directory_returns_empty(self, temp_dir: str) -> None:
        """Test directory returns empty."""
        assert get_include_directives(temp_dir) == []

    def test_reads_file(self, temp_dir: str) -> None:
        """Test directives are read from a file on disk."""
        source = Path(temp_dir) / "a.cpp"
        source.write_text('#include <vector>\nint x;\n#include "b.h"\n')

        directives = get_include_directives(str(source))

        assert directives == [
            IncludeDirective(FilePath("vector"), FilePath(str(source)), 1, True),
            IncludeDirective(FilePath("b.h"), FilePath(str(source)), 3, False),
        ]

    def test_extraction_is_idempotent(self, temp_dir: str) -> None:
        """Test extraction is idempotent."""
        source = Path(temp_dir) / "a.cpp"
        source.write_text('#include <a.h>\n#include "b.h"\n  # include <c.h>\n')

        assert get_include_directives(str(source)) == get_include_directives(str(source))

    def test_invalid_utf8_is_ignored(self, temp_dir: str) -> None:
        """Test invalid utf8 is ignored."""
        source = Path(temp_dir) / "latin1.cpp"
        source.write_bytes(b'// caf\xe9\n#include "b.h"\n')

        directives = get_include_directives(str(source))
        assert [(str(d.included_file), d.line_number) for d in directives] == [("b.h", 2)]

    def test_form_feed_line_in_file(self, temp_dir: str) -> None:
        """Test a form feed on its own line counts as exactly one physical line."""
        source = Path(temp_dir) / "a.cpp"
        source.write_text("int x;\n\f\n#include <missing.h>\n// caf\u2028e\n#include \"b.h\"\n", encoding="utf-8")

        directives = get_include_directives(str(source))
        assert [d.line_number for d in directives] == [3, 5]


class TestIncludeDirectiveFormatting:
    """Test rendering helpers used by diagnostics."""

    def test_format_include(self) -> None:
        """Test format include."""
        assert IncludeDirective(FilePath("vector"), FilePath("/a.cpp"), 1, True).format_include() == "<vector>"
        assert IncludeDirective(FilePath("b.h"), FilePath("/a.cpp"), 1, False).format_include() == '"b.h"'

    def test_format_location_absolute(self) -> None:
        """Test format location absolute."""
        directive = IncludeDirective(FilePath("b.h"), FilePath("/x/a.cpp"), 7, False)
        assert directive.format_location() == "/x/a.cpp:7"

    def test_format_location_relative_to_project_root(self, temp_dir: str) -> None:
        """Test format location relative to project root."""
        including = os.path.join(temp_dir, "src", "a.cpp")
        directive = IncludeDirective(FilePath("b.h"), FilePath(including), 3, False)
        assert directive.format_location(temp_dir) == f"{os.path.join('src', 'a.cpp')}:3"

    def test_sort_key_is_included_file(self) -> None:
        """Test sort key is included file."""
        directive = IncludeDirective(FilePath("b.h"), FilePath("/a.cpp"), 3, False)
        assert directive.sort_key() == FilePath("b.h")


class TestTextAccess:
    """Test TextAccess construction."""

    def test_create_from_file_missing(self, temp_dir: str) -> None:
        """Test create from file missing."""
        text = TextAccess.create_from_file(os.path.join(temp_dir, "gone.h"))
        assert text.get_all_lines() == []
        assert text.get_line_count() == 0

    def test_create_from_string(self) -> None:
        """Test create from string."""
        text = TextAccess.create_from_string("a\nb\n", "/x.h")
        assert text.get_all_lines() == ["a", "b"]
        assert text.get_file_path() == FilePath("/x.h")

    def test_lines_copy_is_returned(self) -> None:
        """Test lines copy is returned."""
        text = TextAccess.create_from_string("a\n")
        text.get_all_lines().append("b")
        assert text.get_line_count() == 1

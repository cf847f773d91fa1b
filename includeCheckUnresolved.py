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
"""Report #include directives of a C/C++ project that cannot be resolved.

PURPOSE:
    Finds every include directive that does not resolve to a file, using the
    project's known header search directories, so that missing headers or
    missing -I flags are visible before a project is indexed.

WHAT IT DOES:
    - Scans every source file for #include lines (text level, no preprocessor)
    - Resolves each include: absolute path, then relative to the including
      file, then relative to each header search directory
    - Follows resolved includes breadth first, but only inside the indexed
      paths; headers outside them (system, third-party) are leaves
    - Optionally discovers extra search directories first (--search)

USE CASES:
    - "Which headers will the indexer fail to find?"
    - Check that a list of -I directories is complete
    - Gate a CI job on include hygiene with --strict

OUTPUT:
    One line per distinct unresolved include path:
        src/a.cpp:3: cannot resolve include <missing.h>
    An include path that is unresolved in several files is reported once.

EXAMPLES:
    # Unresolved includes of all sources below src/
    ./includeCheckUnresolved.py src/ -I include/

    # Discover search directories in third_party/ first, fail on leftovers
    ./includeCheckUnresolved.py src/ -I include/ --search third_party/ --strict

    # Use directories written by includeCheckSearchPaths.py --output
    ./includeCheckUnresolved.py build/compile_commands.json --include-dirs-file search_dirs.txt --json unresolved.json
"""
import sys
import argparse
import logging
from typing import Any

from includecheck.package_verification import require_package

require_package("networkx", "include graph analysis")
require_package("GitPython", "indexed path detection")
require_package("colorama", "colored output")

from includecheck.color_utils import Colors, ProgressPrinter, print_success, print_warning, should_use_color
from includecheck.constants import (
    DEFAULT_QUANTILE_COUNT,
    EXIT_INVALID_ARGS,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_UNRESOLVED_INCLUDES,
    MAX_CYCLES_DISPLAY,
    MAX_UNRESOLVED_DISPLAY,
    IncludeCheckError,
)
from includecheck.export_utils import (
    export_include_graph,
    export_unresolved_to_csv,
    export_unresolved_to_json,
    format_unresolved_directive,
    load_search_directories,
)
from includecheck.graph_utils import create_include_graph, find_include_cycles
from includecheck.include_processing import get_header_search_directories, get_unresolved_include_directives
from includecheck.source_utils import collect_source_files, find_project_root_from_sources, get_default_indexed_paths, validate_directories

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def parse_arguments() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Report #include directives that cannot be resolved.",
        epilog="""
Sources can be source files, directories (searched recursively) or a
compile_commands.json. Without --indexed, the git repository containing the
sources (or their common directory) is the indexed path.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("sources", nargs="+", metavar="SOURCE", help="Source files, directories or compile_commands.json")

    parser.add_argument(
        "--indexed", action="append", default=[], metavar="DIR", help="Directory that belongs to the project; includes are followed only inside these"
    )

    parser.add_argument("--include-dir", "-I", action="append", default=[], metavar="DIR", help="Header search directory (can be used multiple times)")

    parser.add_argument("--include-dirs-file", metavar="FILE", help="File with one header search directory per line")

    parser.add_argument(
        "--search", "-s", action="append", default=[], metavar="DIR", help="Discover additional header search directories in DIR before checking"
    )

    parser.add_argument(
        "--quantiles", type=int, default=DEFAULT_QUANTILE_COUNT, help=f"Number of source quantiles for progress reporting (default: {DEFAULT_QUANTILE_COUNT})"
    )

    parser.add_argument(
        "--max-results", type=int, default=MAX_UNRESOLVED_DISPLAY, help=f"Maximum unresolved includes to print (default: {MAX_UNRESOLVED_DISPLAY})"
    )

    parser.add_argument("--strict", action="store_true", help=f"Exit with code {EXIT_UNRESOLVED_INCLUDES} when any include is unresolved")

    parser.add_argument("--show-cycles", action="store_true", help="Also report include cycles among project files")

    parser.add_argument("--json", metavar="FILE", help="Export unresolved includes to JSON")

    parser.add_argument("--csv", metavar="FILE", help="Export unresolved includes to CSV")

    parser.add_argument("--export-graph", metavar="FILE", help="Export the walked include graph (.graphml, .gexf, .json)")

    parser.add_argument("--no-progress", action="store_true", help="Do not draw a progress bar")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args()


def print_cycles(include_graph: Any) -> None:
    cycles, self_loops = find_include_cycles(include_graph)
    if not cycles and not self_loops:
        print_success("No include cycles found")
        return

    print(f"\n{Colors.BRIGHT}Include cycles ({len(cycles)}):{Colors.RESET}")
    for cycle in cycles[:MAX_CYCLES_DISPLAY]:
        members = ", ".join(sorted(cycle))
        print(f"  {Colors.YELLOW}{members}{Colors.RESET}")
    if len(cycles) > MAX_CYCLES_DISPLAY:
        print(f"  {Colors.DIM}... and {len(cycles) - MAX_CYCLES_DISPLAY} more{Colors.RESET}")
    for node in self_loops:
        print(f"  {Colors.YELLOW}{node} includes itself{Colors.RESET}")


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, EXIT_UNRESOLVED_INCLUDES for --strict failures)
    """
    args = parse_arguments()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    if args.quantiles < 1:
        logger.error("Quantile count must be at least 1")
        return EXIT_INVALID_ARGS

    if args.max_results < 1:
        logger.error("Max results must be at least 1")
        return EXIT_INVALID_ARGS

    source_files = collect_source_files(args.sources)
    source_strings = [str(p) for p in source_files]
    project_root = find_project_root_from_sources(source_strings)

    header_search_directories = set(validate_directories(args.include_dir, "Include directory"))
    if args.include_dirs_file:
        header_search_directories.update(load_search_directories(args.include_dirs_file))

    if args.indexed:
        indexed_paths = validate_directories(args.indexed, "Indexed path")
    else:
        indexed_paths = get_default_indexed_paths(source_strings)

    if args.search:
        searched_paths = validate_directories(args.search, "Search path")
        discovered = get_header_search_directories(
            source_files,
            searched_paths,
            header_search_directories,
            desired_quantile_count=args.quantiles,
            progress=ProgressPrinter("Discovering header search directories", enabled=not args.no_progress),
        )
        logger.info("Adding %s discovered header search directories", len(discovered - header_search_directories))
        header_search_directories.update(discovered)

    include_graph = create_include_graph() if (args.export_graph or args.show_cycles) else None

    unresolved = get_unresolved_include_directives(
        source_files,
        indexed_paths,
        header_search_directories,
        desired_quantile_count=args.quantiles,
        progress=ProgressPrinter("Checking include directives", enabled=not args.no_progress),
        include_graph=include_graph,
    )

    if unresolved:
        print(f"\n{Colors.BRIGHT}Unresolved include directives ({len(unresolved)}):{Colors.RESET}")
        for directive in unresolved[: args.max_results]:
            print(f"  {Colors.RED}{format_unresolved_directive(directive, project_root)}{Colors.RESET}")
        if len(unresolved) > args.max_results:
            print(f"  {Colors.DIM}... and {len(unresolved) - args.max_results} more{Colors.RESET}")
    else:
        print_success("All include directives resolved")

    if include_graph is not None and args.show_cycles:
        print_cycles(include_graph)

    if args.json:
        export_unresolved_to_json(args.json, unresolved)

    if args.csv:
        export_unresolved_to_csv(args.csv, unresolved)

    if include_graph is not None and args.export_graph:
        export_include_graph(args.export_graph, include_graph, project_root)

    if unresolved and args.strict:
        print_warning(f"{len(unresolved)} unresolved include directives")
        return EXIT_UNRESOLVED_INCLUDES

    return EXIT_SUCCESS


if __name__ == "__main__":
    try:
        exit_code = main()
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.warning("\nInterrupted by user")
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except IncludeCheckError as e:
        logger.error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if logging.getLogger().level == logging.DEBUG:
            import traceback

            traceback.print_exc()
        sys.exit(EXIT_RUNTIME_ERROR)

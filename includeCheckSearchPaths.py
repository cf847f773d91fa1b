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
"""Discover the header search directories a C/C++ project needs.

PURPOSE:
    Finds the directories that must be passed to the compiler (as -I flags) so
    that the #include directives of a project resolve, by matching unresolved
    includes against snapshots of directories you point it at.

WHAT IT DOES:
    - Scans every source file for #include lines (text level, no preprocessor)
    - Follows resolved includes breadth first, scanning each file once
    - For an include no known directory resolves, searches the --search trees
      for a directory below which the include path exists
    - Reports every directory discovered that way

USE CASES:
    - "Which -I flags does this checkout need?"
    - Bootstrap the search path list of an indexer for a project without a build system
    - Find where a vendored library's headers actually live

METHOD:
    Include "sub/x.h" is unresolved. A --search tree contains /ext/lib/sub/x.h,
    so /ext/lib becomes a header search directory and x.h is scanned in turn.
    When two roots match, the first one in sorted order wins.

OUTPUT:
    Sorted list of discovered header search directories, or -I flags with --flags.

EXAMPLES:
    # Discover search directories for all sources below src/, looking in third_party/
    ./includeCheckSearchPaths.py src/ --search third_party/

    # Start from a compilation database and print compiler flags
    ./includeCheckSearchPaths.py build/compile_commands.json --search /opt/sdk --flags

    # Write the directories to a file for includeCheckUnresolved.py --include-dirs-file
    ./includeCheckSearchPaths.py src/ --search . --output search_dirs.txt
"""
import sys
import argparse
import logging

from includecheck.package_verification import require_package

require_package("networkx", "include graph analysis")
require_package("colorama", "colored output")

from includecheck.color_utils import Colors, ProgressPrinter, print_warning, should_use_color
from includecheck.compiler_args import get_search_path_arguments
from includecheck.constants import DEFAULT_QUANTILE_COUNT, EXIT_INVALID_ARGS, EXIT_KEYBOARD_INTERRUPT, EXIT_RUNTIME_ERROR, EXIT_SUCCESS, IncludeCheckError
from includecheck.export_utils import export_include_graph, export_search_directories
from includecheck.graph_utils import create_include_graph
from includecheck.include_processing import get_header_search_directories
from includecheck.source_utils import collect_source_files, find_project_root_from_sources, validate_directories

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def parse_arguments() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Discover header search directories by matching unresolved includes against directory snapshots.",
        epilog="""
Sources can be source files, directories (searched recursively) or a
compile_commands.json. Directories given with --include-dir are treated as
already known and are only reported when they are rediscovered.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("sources", nargs="+", metavar="SOURCE", help="Source files, directories or compile_commands.json")

    parser.add_argument(
        "--search", "-s", action="append", default=[], metavar="DIR", help="Directory to snapshot for header inference (can be used multiple times)"
    )

    parser.add_argument(
        "--include-dir", "-I", action="append", default=[], metavar="DIR", help="Already known header search directory (can be used multiple times)"
    )

    parser.add_argument(
        "--quantiles", type=int, default=DEFAULT_QUANTILE_COUNT, help=f"Number of source quantiles for progress reporting (default: {DEFAULT_QUANTILE_COUNT})"
    )

    parser.add_argument("--flags", action="store_true", help="Print -I compiler flags instead of plain directories")

    parser.add_argument("--output", "-o", metavar="FILE", help="Write the discovered directories to FILE, one per line")

    parser.add_argument("--export-graph", metavar="FILE", help="Export the walked include graph (.graphml, .gexf, .json)")

    parser.add_argument("--no-progress", action="store_true", help="Do not draw a progress bar")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args()


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = parse_arguments()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    if args.quantiles < 1:
        logger.error("Quantile count must be at least 1")
        return EXIT_INVALID_ARGS

    source_files = collect_source_files(args.sources)
    searched_paths = validate_directories(args.search, "Search path")
    known_directories = validate_directories(args.include_dir, "Include directory")

    if not searched_paths:
        print_warning("No --search directories given; only already resolvable includes will be followed")

    include_graph = create_include_graph() if args.export_graph else None
    progress = ProgressPrinter("Discovering header search directories", enabled=not args.no_progress)

    header_search_directories = get_header_search_directories(
        source_files,
        searched_paths,
        known_directories,
        desired_quantile_count=args.quantiles,
        progress=progress,
        include_graph=include_graph,
    )

    if args.flags:
        for flag in get_search_path_arguments(header_search_directories):
            print(flag)
    else:
        print(f"\n{Colors.BRIGHT}Discovered {len(header_search_directories)} header search directories:{Colors.RESET}")
        for directory in sorted(header_search_directories):
            print(f"  {Colors.CYAN}{directory}{Colors.RESET}")

    if args.output:
        export_search_directories(args.output, header_search_directories)

    if include_graph is not None:
        export_include_graph(args.export_graph, include_graph, find_project_root_from_sources(str(p) for p in source_files))

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

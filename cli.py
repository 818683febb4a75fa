#!/usr/bin/env python3
"""
Redux Mapper CLI

Scans a project for redux reducer definitions and works out which reducers
each route container needs, writing a global reducers module and a reducer
map for hot-reload aware lazy loading.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

from errors import MapperError
from exporters import to_global_module, to_reducer_map
from scanner.builder import build_reducer_map
from settings import (
    CONFIG_FILENAMES,
    build_settings,
    find_config_file,
    find_project_root,
    load_config_file,
    merge_options,
)


DESCRIPTION = (
    "Generates a global and a component specific mapping file, removing the need to "
    "list by hand all reducers a route needs when using hot module reloading. Each "
    "reducer definition file must contain a PRM_REDUCER_NAME constant naming the "
    "reducer state member."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redux-mapper",
        description=DESCRIPTION,
        add_help=False,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Any option not given on the command line is read from the "config" mapping
of {CONFIG_FILENAMES[0]} (or {CONFIG_FILENAMES[1]}) in the project root.

Examples:
  redux-mapper -b app -a app.jsx -c containers -r redux -f actions.js \\
               -g generated/globalReducers.js -m generated/reducerMap.js
  redux-mapper -v                    # all options from {CONFIG_FILENAMES[0]}
        """,
    )

    parser.add_argument(
        "-a", "--mainAppPath",
        default=None,
        help="the path to the app's main JS/JSX file. Any reducers used by this file are considered global",
    )

    parser.add_argument(
        "-b", "--basePath",
        default=None,
        help="the path to the root of the project's client-side script files",
    )

    parser.add_argument(
        "-c", "--containerPaths",
        default=None,
        help="comma-separated folders (from base path) containing files which can be a route destination",
    )

    parser.add_argument(
        "-f", "--actionFilenames",
        default=None,
        help="(optional) comma-separated filenames which, if imported from a folder containing a reducer, "
             "mean the reducer is in use. If omitted, action files must contain a PRM_ACTION_FILE_FOR_REDUCER "
             "definition",
    )

    parser.add_argument(
        "-d", "--disableCache",
        action="store_true",
        default=None,
        help="(optional) disable the traversal cache, which is useful for debugging",
    )

    parser.add_argument(
        "-g", "--globalReducersOutputPath",
        default=None,
        help="the output path for the globalReducers.js file",
    )

    parser.add_argument(
        "-h", "--showHelp",
        action="store_true",
        default=False,
        help="(optional) show this help message",
    )

    parser.add_argument(
        "-i", "--ignorePaths",
        default=None,
        help="(optional) regular expression of paths/filenames to ignore (e.g. __tests__)",
    )

    parser.add_argument(
        "-m", "--reducerMapOutputPath",
        default=None,
        help="the output path for the reducerMap.js file",
    )

    parser.add_argument(
        "-r", "--reduxPaths",
        default=None,
        help="comma-separated root folders under which all the redux reducers can be found",
    )

    parser.add_argument(
        "-s", "--sagaFilename",
        default=None,
        help="(optional) the filename holding each reducer's sagas (e.g. sagas.js). "
             "Specify an empty string if you don't use sagas",
    )

    parser.add_argument(
        "-v", "--verboseLogging",
        action="store_true",
        default=None,
        help="(optional) turn on verbose logging",
    )

    return parser


def parse_args(args=None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(args)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.INFO)


def write_output(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    print(f"Output written to: {path}", file=sys.stderr)


def main(args=None, cwd: Optional[Path] = None) -> int:
    """Main entry point."""
    parsed = parse_args(args)

    if parsed.showHelp:
        build_parser().print_help()
        return 0

    started = time.perf_counter()
    print("redux-mapper", file=sys.stderr)
    print("Use -h argument for a full list of command line options", file=sys.stderr)

    cli_options: Dict[str, Any] = {
        name: value for name, value in vars(parsed).items() if name != "showHelp"
    }

    try:
        project_root = find_project_root(cwd or Path.cwd())
        file_options = load_config_file(find_config_file(project_root))
        settings = build_settings(merge_options(cli_options, file_options), project_root)

        configure_logging(settings.verbose_logging)

        reducer_map = build_reducer_map(settings)
    except MapperError as e:
        print(f"\n{e.format()}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error scanning project: {e}", file=sys.stderr)
        return 1

    try:
        write_output(
            settings.global_reducers_output_path,
            to_global_module(reducer_map.global_reducers, settings.global_reducers_output_path),
        )
        write_output(
            settings.reducer_map_output_path,
            to_reducer_map(reducer_map, settings.reducer_map_output_path),
        )
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    print(
        f"\nSUCCESS! Found {reducer_map.usages_found} reducers used in "
        f"{reducer_map.files_scanned} files. Elapsed time: {elapsed_ms}ms",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
PXF Options — Foreign-Data Wrapper Option Tool
==============================================
Entry point for validating and resolving PXF foreign-data wrapper options.

Usage:
    python main.py <command> [options] [catalog_path]

Commands:
    validate LEVEL name=value ...   Validate one catalog level's options
    resolve TABLE                   Print the merged options of a foreign table
    bootstrap                       Install the standard PXF wrappers
    wrappers                        List foreign-data wrappers

Default catalog path: ./pxf_catalog
"""

import getpass
import logging
import os
import sys
from typing import List, Optional

logger = logging.getLogger(__name__)


def print_help():
    print("""
PXF Options — Foreign-Data Wrapper Option Tool

Usage:
    python main.py validate LEVEL [name=value ...]
    python main.py resolve TABLE [--user NAME] [catalog_path]
    python main.py bootstrap [catalog_path]
    python main.py wrappers [catalog_path]

Levels:
    wrapper, server, user_mapping, table, column

Options:
    --help          Show this help
    --user NAME     User whose mapping is used (default: current user)
    --verbose       Log debug output to stderr
    catalog_path    Path to catalog directory (default: ./pxf_catalog)

Environment:
    PXF_HOST, PXF_PORT, PXF_PROTOCOL   Override the built-in defaults
""")


def parse_option_pairs(pairs: List[str]) -> List[tuple]:
    """Parse name=value arguments, keeping order and duplicates."""
    options = []
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected name=value, got '{pair}'")
        options.append((name.strip(), value))
    return options


def run_validate(level_name: str, pairs: List[str], renderer) -> bool:
    from options.levels import level_from_string
    from options.validator import validate_options

    try:
        level = level_from_string(level_name)
        validate_options(parse_option_pairs(pairs), level)
    except Exception as e:
        renderer.render_error(e)
        return False
    renderer.render_message(f"OK: options valid at {level.relation_name} level")
    return True


def run_resolve(catalog_path: str, table: str, user: str, renderer) -> bool:
    from catalog.resolver import CatalogResolver
    from catalog.system_catalog import ForeignCatalog
    from options.defaults import OptionDefaults

    try:
        catalog = ForeignCatalog(catalog_path)
        resolver = CatalogResolver(catalog, OptionDefaults.from_env())
        config = resolver.resolve_options(table, user)
    except Exception as e:
        renderer.render_error(e)
        return False
    renderer.render_config(config)
    return True


def run_bootstrap(catalog_path: str, renderer) -> bool:
    from catalog.bootstrap import bootstrap_catalog

    try:
        catalog = bootstrap_catalog(catalog_path)
    except Exception as e:
        renderer.render_error(e)
        return False
    renderer.render_message(
        f"Catalog at {catalog_path}: {len(catalog.list_wrappers())} foreign-data wrapper(s)"
    )
    return True


def run_wrappers(catalog_path: str, renderer) -> bool:
    from catalog.system_catalog import ForeignCatalog

    try:
        catalog = ForeignCatalog(catalog_path)
    except Exception as e:
        renderer.render_error(e)
        return False
    rows = [
        {"oid": w.oid, "name": w.name,
         "options": ", ".join(f"{n} '{v}'" for n, v in w.options),
         "mpp_execute": w.exec_location.value}
        for w in catalog.list_wrappers()
    ]
    renderer.render_rows(rows, ["oid", "name", "options", "mpp_execute"])
    return True


def main(argv: Optional[List[str]] = None) -> None:
    """Parse CLI arguments and dispatch."""
    from cli.renderer import Renderer

    args = list(sys.argv[1:] if argv is None else argv)

    if not args or "--help" in args or "-h" in args:
        print_help()
        return

    verbose = False
    user = None
    positional = []

    i = 0
    while i < len(args):
        if args[i] == "--verbose":
            verbose = True
            i += 1
        elif args[i] == "--user" and i + 1 < len(args):
            user = args[i + 1]
            i += 2
        elif args[i].startswith("--"):
            print(f"Unknown option: {args[i]}", file=sys.stderr)
            print_help()
            sys.exit(1)
        else:
            positional.append(args[i])
            i += 1

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not positional:
        print_help()
        sys.exit(1)

    renderer = Renderer()
    command, rest = positional[0], positional[1:]
    default_path = os.path.join(os.getcwd(), "pxf_catalog")

    if command == "validate" and rest:
        ok = run_validate(rest[0], rest[1:], renderer)
    elif command == "resolve" and rest:
        catalog_path = rest[1] if len(rest) > 1 else default_path
        ok = run_resolve(catalog_path, rest[0], user or getpass.getuser(), renderer)
    elif command == "bootstrap":
        ok = run_bootstrap(rest[0] if rest else default_path, renderer)
    elif command == "wrappers":
        ok = run_wrappers(rest[0] if rest else default_path, renderer)
    else:
        print(f"Unknown or incomplete command: {' '.join(positional)}", file=sys.stderr)
        print_help()
        sys.exit(1)

    if not ok:
        logger.debug("command %s failed", command)
        sys.exit(1)


if __name__ == "__main__":
    main()

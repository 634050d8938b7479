"""
Check the metadata of Elasticsearch indices for settings and mappings that are deprecated or removed in the
next major version.

Index metadata is read from files containing the response of GET /<index> (one or more indices per file).
Use GET /_nodes to create the (optional) nodes file, which enables the data tier checks.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from esdeprecation.config import ENV_PREFIX, get_settings
from esdeprecation.deprecations import check_indices
from esdeprecation.models import ClusterState, IndexMetadata


def read_json(path: str | Path) -> Any:
    with open(path) as f:
        return json.load(f)


def read_indices(paths: list[str]) -> list[IndexMetadata]:
    indices = []
    for path in paths:
        for name, body in read_json(path).items():
            indices.append(IndexMetadata.from_elastic(name, body))
    return indices


def check(args):
    try:
        indices = read_indices(args.files)
    except RecursionError:
        logging.error("Cannot read index metadata: the JSON is nested too deep to be parsed")
        sys.exit(1)
    except (OSError, ValueError) as e:
        logging.error(f"Cannot read index metadata: {e}")
        sys.exit(1)
    try:
        cluster_state = ClusterState.from_elastic(read_json(args.nodes)) if args.nodes else None
    except (OSError, ValueError) as e:
        logging.error(f"Cannot read nodes file: {e}")
        sys.exit(1)
    if cluster_state is None:
        logging.info("No nodes file given, skipping data tier checks")

    result = check_indices(indices, cluster_state)
    output = {name: [issue.model_dump(mode="json") for issue in issues] for (name, issues) in result.items()}
    print(json.dumps(output, indent=2))
    if args.fail_on_critical and any(issue.level == "critical" for issues in result.values() for issue in issues):
        sys.exit(2)


def show_config(_args):
    settings = get_settings()
    for fieldname, fieldinfo in type(settings).model_fields.items():
        if doc := fieldinfo.description:
            print(f"# {doc}")
        print(f"{ENV_PREFIX.upper()}{fieldname.upper()}={getattr(settings, fieldname)}\n")


def main():
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m esdeprecation")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("check", help="Check index metadata for deprecated settings and mappings")
    p.add_argument("files", nargs="+", help="JSON file(s) with the response of GET /<index>")
    p.add_argument("-n", "--nodes", help="JSON file with the response of GET /_nodes")
    p.add_argument(
        "--fail-on-critical",
        action="store_true",
        help="Exit with status 2 if any critical issue is found",
    )
    p.set_defaults(func=check)

    p = subparsers.add_parser("config", help="Show the current settings")
    p.set_defaults(func=show_config)

    args = parser.parse_args()

    level = getattr(logging, get_settings().log_level.value.upper())
    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=level)

    args.func(args)


if __name__ == "__main__":
    main()

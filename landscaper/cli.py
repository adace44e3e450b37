import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_BRANCH_NAME, GlobalOptions, load_settings
from .errors import ConfigurationError
from .github_client import GithubClient
from .logging_config import configure_logging
from .strategies import (
    AddBadgeStrategy,
    CreateCatalogStrategy,
    EnrichCatalogStrategy,
    FindReplaceStrategy,
    get_strategy,
)
from .workflows.bulk_change.state import BulkChangeDeps, BulkChangeState
from .workflows.bulk_change.workflow import run_bulk_change_workflow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="landscaper",
        description="Bulk changes across every repository in a GitHub organization.",
    )
    parser.add_argument(
        "-w", "--write", action="store_true",
        help="Actually write the changes to GitHub (default: dry run)",
    )
    parser.add_argument("-o", "--org", required=True, help="The GitHub org to change")
    parser.add_argument(
        "-b", "--branch", default=DEFAULT_BRANCH_NAME,
        help=f"The branch changes will be pushed to (default: {DEFAULT_BRANCH_NAME})",
    )
    parser.add_argument(
        "--repo", dest="repo_filter",
        help="Regex filter on the repository name, to only target specific repositories",
    )
    parser.add_argument(
        "--skip", type=int, default=0,
        help="Skip the first N matching repositories (resume a long run)",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")

    commands = parser.add_subparsers(dest="command", required=True)

    find_replace = commands.add_parser(
        FindReplaceStrategy.name, help="Find and replace a string in all files in an org"
    )
    find_replace.add_argument("-f", "--find", required=True, help="The string to find")
    find_replace.add_argument(
        "-r", "--replace", required=True, help="The string to replace it with"
    )
    find_replace.add_argument("-m", "--message", help="Commit message for each file")

    commands.add_parser(
        CreateCatalogStrategy.name, help="Create missing catalog-info.yaml files in an org"
    )
    commands.add_parser(
        EnrichCatalogStrategy.name, help="Try and fill out catalog-info.yaml files in an org"
    )
    commands.add_parser(
        AddBadgeStrategy.name, help="Add ownership badges to README.md files in an org"
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level, force=True)
    try:
        settings = load_settings()
        strategy = get_strategy(
            args.command,
            find=getattr(args, "find", None),
            replace=getattr(args, "replace", None),
            message=getattr(args, "message", None),
        )
        options = GlobalOptions(
            org=args.org,
            write=args.write,
            branch=args.branch,
            repo_filter=args.repo_filter,
            skip=args.skip,
        )
        client = GithubClient(settings.github_token)
        state = BulkChangeState(strategy=strategy, options=options, settings=settings)
        try:
            asyncio.run(run_bulk_change_workflow(state, BulkChangeDeps(source=client)))
        finally:
            client.close()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted; already opened pull requests are kept")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""CLI entrypoint for gitcherry."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .classifier import run_cherry
from .config import CherryConfig, load_config
from .errors import FATAL_EXIT_CODE, CherryError, UsageError
from .git.repository import AUTO_ABBREV, FULL_ABBREV, GitRepository
from .logging import configure_logging, get_logger
from .output import OutputFormatter


_ABBREV_WITH_VALUE = "--abbrev="
_ABBREV_LENGTH = "--abbrev-length"


class _CherryArgumentParser(argparse.ArgumentParser):
    """Binds a length to --abbrev only when it is spelled --abbrev=<n>."""

    def parse_known_args(self, args=None, namespace=None):  # type: ignore[no-untyped-def]
        if args is None:
            args = sys.argv[1:]
        return super().parse_known_args(_split_abbrev(list(args)), namespace)


def _split_abbrev(args: list[str]) -> list[str]:
    rewritten: list[str] = []
    for position, arg in enumerate(args):
        if arg == "--":
            rewritten.extend(args[position:])
            break
        if arg.startswith(_ABBREV_WITH_VALUE):
            arg = f"{_ABBREV_LENGTH}={arg[len(_ABBREV_WITH_VALUE):]}"
        rewritten.append(arg)
    return rewritten


def _abbrev_length(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"--abbrev expects a number, got {value!r}") from None


def _build_parser() -> argparse.ArgumentParser:
    parser = _CherryArgumentParser(
        prog="gitcherry",
        usage="%(prog)s [-v] [--abbrev[=<n>]] [<upstream> [<head> [<limit>]]]",
        description=(
            "Find commits in <head> not yet applied to <upstream>. Commits whose change "
            "already exists upstream are marked '-', the rest '+'."
        ),
    )
    parser.add_argument(
        "upstream",
        nargs="?",
        help="Upstream branch to compare against (defaults to the tracked upstream).",
    )
    parser.add_argument(
        "head",
        nargs="?",
        help="Working branch (defaults to HEAD).",
    )
    parser.add_argument(
        "limit",
        nargs="?",
        help="Do not report commits up to and including this one.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show the commit subject next to each id.",
    )
    parser.add_argument(
        "--abbrev",
        dest="abbrev",
        action="store_const",
        const=AUTO_ABBREV,
        help="Abbreviate ids; --abbrev=<n> asks for at least n hex digits.",
    )
    parser.add_argument(
        _ABBREV_LENGTH,
        dest="abbrev",
        type=_abbrev_length,
        help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--no-abbrev",
        dest="abbrev",
        action="store_const",
        const=FULL_ABBREV,
        help="Show full object ids.",
    )
    parser.add_argument(
        "-C",
        dest="repo_path",
        default=".",
        metavar="path",
        help="Run as if started in <path> (defaults to current directory).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log walk and git activity to stderr for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    parser.set_defaults(abbrev=None)
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for gitcherry."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    repo_path = Path(args.repo_path)
    repository = GitRepository(repo_path)

    try:
        config = load_config(repository.toplevel() or repo_path)
    except CherryError as exc:
        parser.exit(exc.exit_code, f"fatal: {exc}\n")

    log_file = args.log_file or config.log_file
    try:
        configure_logging(debug=bool(args.debug), log_file=log_file)
    except OSError as exc:
        parser.exit(FATAL_EXIT_CODE, f"fatal: cannot open log file {log_file}: {exc.strerror or exc}\n")
    logger = get_logger("cli")

    formatter = OutputFormatter(
        repository,
        verbose=bool(args.verbose) or bool(config.verbose),
        abbrev=_effective_abbrev(args.abbrev, config),
    )

    # Everything is classified and rendered before the first byte reaches stdout.
    try:
        repository.ensure_repository()
        commits = run_cherry(
            repository,
            args.upstream,
            args.head,
            args.limit,
            ignore_whitespace=config.fingerprint.ignore_whitespace,
        )
        report = formatter.render(commits)
    except UsageError as exc:
        parser.print_usage(sys.stderr)
        parser.exit(exc.exit_code, f"error: {exc}\n")
    except CherryError as exc:
        logger.debug("Aborting", exc_info=True)
        parser.exit(exc.exit_code, f"fatal: {exc}\n")

    sys.stdout.write(report)


def _effective_abbrev(flag: int | None, config: CherryConfig) -> int:
    if flag is not None:
        return flag
    if config.abbrev is not None:
        return config.abbrev
    return FULL_ABBREV


if __name__ == "__main__":
    main(sys.argv[1:])

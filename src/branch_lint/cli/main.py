"""CLI entry point for branch-lint."""
import argparse
from dotenv import load_dotenv
import asyncio
import json
import logging
import sys
import traceback
from pathlib import Path

from branch_lint.models import ConfigError, LintConfig, OutcomeStatus, PipelineOutcome
from branch_lint.orchestrator.exceptions import OrchestratorError

load_dotenv()

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_FINDINGS = 2
EXIT_PIPELINE_FAILED = 3
EXIT_CANCELLED = 4
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

SAME_BRANCH_MESSAGE = "Base and comparison branch are the same; nothing to compare."


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="branch-lint",
        description=(
            "Run a static-analysis tool on the files a branch changed "
            "since it diverged from its base branch"
        ),
    )
    parser.add_argument("base_branch", type=str, help="Base branch to compare against")
    parser.add_argument("compare_branch", type=str, help="Branch whose changes are analysed")
    parser.add_argument(
        "repo_path",
        type=str,
        nargs="?",
        default=".",
        help="Path to the repository root (default: current directory)",
    )
    parser.add_argument(
        "--executable",
        type=str,
        default=None,
        help="Analysis tool to run (default: $BRANCH_LINT_EXECUTABLE or pylint)",
    )
    parser.add_argument(
        "--extension",
        type=str,
        default=None,
        help="File extension to analyse (default: $BRANCH_LINT_EXTENSION or .py)",
    )
    parser.add_argument(
        "--rcfile-name",
        type=str,
        default=None,
        help="Tracked config file to pass as --rcfile (default: .pylintrc)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Kill the tool after this many seconds (default: no timeout)",
    )
    parser.add_argument(
        "--env",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra environment variable for the tool (repeatable)",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        help="Print the files that would be analysed and exit",
    )
    parser.add_argument(
        "--list-envs",
        action="store_true",
        help="Print every venv/.venv directory under the repository and exit",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--dry-run", action="store_true", help="Print config and exit without running"
    )
    parser.add_argument(
        "--output-json", action="store_true", help="Output results as JSON"
    )
    return parser


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for CLI runs."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def validate_repo_path(raw_path: str) -> str:
    """Validate and resolve the repository path.

    Raises:
        SystemExit: If path is not a valid directory.
    """
    resolved = Path(raw_path).resolve()
    if not resolved.is_dir():
        print(f"Error: '{raw_path}' is not a valid directory.", file=sys.stderr)
        raise SystemExit(EXIT_INVALID_INPUT)
    return str(resolved)


def parse_env_pairs(pairs: list[str]) -> dict[str, str]:
    """Parse KEY=VALUE strings.

    Raises:
        ConfigError: If a pair has no '=' or an empty key.
    """
    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigError(f"Invalid --env value '{pair}', expected KEY=VALUE")
        env[key] = value
    return env


def build_config(args: argparse.Namespace) -> LintConfig:
    """Merge CLI flags over BRANCH_LINT_* environment variables."""
    return LintConfig.from_env(
        executable=args.executable,
        extension=args.extension,
        config_file_name=args.rcfile_name,
        timeout_seconds=args.timeout,
        extra_env=parse_env_pairs(args.env) or None,
    )


def format_outcome_json(outcome: PipelineOutcome) -> str:
    return json.dumps(outcome.model_dump(mode="json"), indent=2, default=str)


def print_outcome_human(outcome: PipelineOutcome) -> None:
    """Print the outcome in human-readable format."""
    print(f"\n{'='*60}")
    print(f"branch-lint: {outcome.base_branch}...{outcome.compare_branch}")
    print(f"{'='*60}")
    print(f"\nStatus: {outcome.status.value}")
    print(f"Files analysed: {len(outcome.files)}")
    if outcome.config_path:
        print(f"Config file: {outcome.config_path}")

    result = outcome.tool_result
    if result is not None:
        print(f"Tool exit code: {result.code}")
        if result.stdout:
            print(f"\n{result.stdout.rstrip()}")
        if result.stderr:
            print(f"\n{result.stderr.rstrip()}", file=sys.stderr)

    if outcome.error:
        print(f"\nError: {outcome.error}")

    print(f"\n{'='*60}")


def determine_exit_code(outcome: PipelineOutcome) -> int:
    """Determine the process exit code from a pipeline outcome."""
    if outcome.status == OutcomeStatus.NO_FILES:
        return EXIT_SUCCESS
    if outcome.status == OutcomeStatus.CANCELLED:
        return EXIT_CANCELLED
    if outcome.status == OutcomeStatus.FAILED:
        return EXIT_PIPELINE_FAILED
    return EXIT_FINDINGS if outcome.has_findings else EXIT_SUCCESS


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def _print_paths(paths: list[str], output_json: bool) -> None:
    if output_json:
        print(json.dumps(paths, indent=2))
    else:
        for path in paths:
            print(path)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        repo_path = validate_repo_path(args.repo_path)
    except SystemExit as exc:
        return exc.code

    try:
        config = build_config(args)
    except ConfigError as exc:
        return _handle_error("Invalid configuration", exc, args.verbose, EXIT_INVALID_INPUT)

    if args.dry_run:
        summary = {
            "repo_path": repo_path,
            "base_branch": args.base_branch,
            "compare_branch": args.compare_branch,
            **config.model_dump(mode="json", exclude={"extra_env"}),
            "extra_env_keys": sorted(config.extra_env),
        }
        print(json.dumps(summary, indent=2))
        return EXIT_SUCCESS

    if args.list_envs:
        from branch_lint.utils.python_env import discover_venvs

        try:
            _print_paths(discover_venvs(repo_path), args.output_json)
        except OSError as exc:
            return _handle_error("Directory search failed", exc, args.verbose, EXIT_UNEXPECTED)
        return EXIT_SUCCESS

    if args.base_branch == args.compare_branch:
        print(SAME_BRANCH_MESSAGE, file=sys.stderr)
        return EXIT_SUCCESS

    try:
        from branch_lint.orchestrator.graph import preview_changed_files, run_analysis

        if args.list_files:
            files = asyncio.run(
                preview_changed_files(
                    repo_path, args.base_branch, args.compare_branch, config
                )
            )
            _print_paths(files, args.output_json)
            return EXIT_SUCCESS

        outcome = asyncio.run(
            run_analysis(repo_path, args.base_branch, args.compare_branch, config)
        )

        if args.output_json:
            print(format_outcome_json(outcome))
        else:
            print_outcome_human(outcome)

        return determine_exit_code(outcome)

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, args.verbose, EXIT_PIPELINE_FAILED)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)


if __name__ == "__main__":
    sys.exit(main())

"""CLI entry point for oas-lint.

Handles argument parsing and dispatches to the lint or list-rules mode.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from oas_lint.config_loader import ConfigError, load_ruleset, resolve_rules
from oas_lint.linter import RuleHost, format_lint_result_text
from oas_lint.loader import DocumentError, load_document
from oas_lint.rules.registry import default_rules, get_rule_function

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2


@dataclass
class LintArgs:
    """Parsed arguments for lint mode."""

    spec: Path
    ruleset: Path | None
    rules: list[str]
    output: str
    verbose: bool


@dataclass
class ListRulesArgs:
    """Parsed arguments for list-rules mode."""

    output: str


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with lint and list-rules subcommands."""
    parser = argparse.ArgumentParser(
        prog="oas-lint",
        description="Rule-based linter for OpenAPI 2.0, 3.0 and 3.1 documents.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Mode")

    lint_parser = subparsers.add_parser("lint", help="Lint an OpenAPI document")
    lint_parser.add_argument(
        "--spec",
        type=Path,
        required=True,
        help="Path to OpenAPI specification file (YAML or JSON)",
    )
    lint_parser.add_argument(
        "--ruleset",
        type=Path,
        default=None,
        help="Path to ruleset file (YAML) enabling, disabling or overriding rules",
    )
    lint_parser.add_argument(
        "--rule",
        type=str,
        action="append",
        default=[],
        metavar="RULE_ID",
        help="Run only this rule (can be repeated)",
    )
    lint_parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    lint_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log rule progress to stderr",
    )

    list_parser = subparsers.add_parser("list-rules", help="List built-in rules")
    list_parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    return parser


def parse_lint_args(namespace: argparse.Namespace) -> LintArgs:
    """Convert parsed namespace to LintArgs dataclass."""
    return LintArgs(
        spec=namespace.spec,
        ruleset=namespace.ruleset,
        rules=list(namespace.rule or []),
        output=namespace.output,
        verbose=namespace.verbose,
    )


def parse_list_rules_args(namespace: argparse.Namespace) -> ListRulesArgs:
    """Convert parsed namespace to ListRulesArgs dataclass."""
    return ListRulesArgs(output=namespace.output)


def parse_args(args: list[str] | None = None) -> LintArgs | ListRulesArgs:
    """Parse command-line arguments and return typed args dataclass.

    Args:
        args: Command-line arguments to parse. If None, uses sys.argv[1:].

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "lint":
        return parse_lint_args(namespace)
    return parse_list_rules_args(namespace)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    try:
        parsed = parse_args(argv)
        if isinstance(parsed, LintArgs):
            return run_lint(parsed)
        return run_list_rules(parsed)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_FINDINGS


def run_lint(args: LintArgs) -> int:
    """Run lint mode.

    Returns:
        1 if any error-severity finding exists, 2 on load or config errors,
        otherwise 0.
    """
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        ruleset = load_ruleset(args.ruleset) if args.ruleset is not None else None
        rules = resolve_rules(ruleset, only=args.rules or None)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        document = load_document(args.spec)
    except DocumentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    result = RuleHost(document, rules).run()

    if args.output == "json":
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_lint_result_text(result))

    return EXIT_FINDINGS if result.has_errors() else EXIT_OK


def run_list_rules(args: ListRulesArgs) -> int:
    """Run list-rules mode: print every built-in rule and its options."""
    entries = []
    for rule in default_rules():
        function = get_rule_function(rule.function)
        options = function.schema().option_names() if function is not None else []
        entries.append(
            {
                "id": rule.id,
                "severity": rule.severity.value,
                "recommended": rule.recommended,
                "description": rule.description,
                "options": options,
            }
        )

    if args.output == "json":
        print(json.dumps(entries, indent=2))
        return EXIT_OK

    for entry in entries:
        marker = "*" if entry["recommended"] else " "
        options = f" (options: {', '.join(entry['options'])})" if entry["options"] else ""
        print(f"{marker} {entry['id']:<26} {entry['severity']:<6} {entry['description']}{options}")
    print("\n* = recommended")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

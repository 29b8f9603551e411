"""
Command-line interface for lexicon-ingest.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .auditor import audit_definition_markup, audit_definitions
from .exceptions import DataImportError, PatchTableError, ReportError
from .models import lemmas_to_json
from .parser import load_root, parse_document
from .patches import (
    ValidationResult,
    apply_patches_with_report,
    default_patch_table,
    dump_patch_table,
    load_patch_table,
    suggest_patch_table,
    validate_patch_table,
)
from .reports import write_report
from .signature import analyze_structure


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the lexicon-ingest CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

    try:
        return args.func(args)
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
        return 1
    except DataImportError as e:
        print(f"\n  [XML ERROR] {e}")
        return 1
    except PatchTableError as e:
        print(f"\n  [PATCH TABLE ERROR] {e}")
        if e.line:
            print(f"                      Line: {e.line}")
        return 1
    except ReportError as e:
        print(f"\n  [ERROR] {e}")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lexicon-ingest",
        description="Parse, audit and patch dictionary XML",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress (-vv for debug detail)",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # parse command
    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse a dictionary file to JSON",
    )
    parse_parser.add_argument("file", type=Path, help="Dictionary XML file")
    parse_parser.add_argument(
        "--no-patches",
        action="store_true",
        help="Skip the data patch layer",
    )
    parse_parser.add_argument(
        "--patch-table",
        type=Path,
        help="YAML patch table (default: packaged table)",
    )
    parse_parser.add_argument(
        "--limit",
        type=int,
        help="Only output the first N lemmas",
    )
    parse_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )
    parse_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write JSON here instead of stdout",
    )
    parse_parser.set_defaults(func=cmd_parse)

    # structure command
    structure_parser = subparsers.add_parser(
        "structure",
        help="Group lemmas by structural signature, rarest first",
    )
    structure_parser.add_argument("file", type=Path, help="Dictionary XML file")
    structure_parser.add_argument(
        "--top",
        type=int,
        default=20,
        help="Number of groups to print (default: 20)",
    )
    structure_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the full JSON report here",
    )
    structure_parser.set_defaults(func=cmd_structure)

    # audit command
    audit_parser = subparsers.add_parser(
        "audit",
        help="Report definition integrity issues",
    )
    audit_parser.add_argument("file", type=Path, help="Dictionary XML file")
    audit_parser.add_argument(
        "--markup",
        action="store_true",
        help="Also report missing glosses and bold-only pointers",
    )
    audit_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the JSON report here",
    )
    audit_parser.set_defaults(func=cmd_audit)

    # check-patches command
    check_parser = subparsers.add_parser(
        "check-patches",
        help="Validate the patch table against audit findings",
    )
    check_parser.add_argument("file", type=Path, help="Dictionary XML file")
    check_parser.add_argument(
        "--patch-table",
        type=Path,
        help="YAML patch table (default: packaged table)",
    )
    check_parser.set_defaults(func=cmd_check_patches)

    # suggest-patches command
    suggest_parser = subparsers.add_parser(
        "suggest-patches",
        help="Draft a patch table from audit findings",
    )
    suggest_parser.add_argument("file", type=Path, help="Dictionary XML file")
    suggest_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the YAML draft here instead of stdout",
    )
    suggest_parser.set_defaults(func=cmd_suggest_patches)

    return parser


def _load_table(path: Optional[Path]):
    return load_patch_table(path) if path else default_patch_table()


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    lemmas = parse_document(load_root(args.file))

    if not args.no_patches:
        lemmas, report = apply_patches_with_report(lemmas, _load_table(args.patch_table))
        print(
            f"Patched {report.changed_count}/{report.applied_count} steps "
            f"over {report.lemma_count} lemmas",
            file=sys.stderr,
        )

    if args.limit is not None:
        lemmas = lemmas[:args.limit]

    output = lemmas_to_json(lemmas, indent=args.indent)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote {len(lemmas)} lemmas to {args.output}", file=sys.stderr)
    else:
        print(output)
    return 0


def cmd_structure(args: argparse.Namespace) -> int:
    """Handle structure command."""
    print(f"\nAnalyzing structure of {args.file}...")
    groups = analyze_structure(args.file)

    total = sum(g.count for g in groups)
    unique = [g for g in groups if g.count == 1]
    print(f"  Lemmas:     {total}")
    print(f"  Structures: {len(groups)}")
    print(f"  Unique:     {len(unique)} (possible anomalies)")

    print(f"\n{'Count':<7} {'Examples':<40} Signature")
    print("-" * 80)
    for group in groups[:args.top]:
        examples = ", ".join(group.examples)
        if len(examples) > 38:
            examples = examples[:35] + "..."
        print(f"{group.count:<7} {examples:<40} {group.signature}")

    if args.output:
        write_report(groups, args.output)
        print(f"\nReport saved to {args.output}")
    return 0


def cmd_audit(args: argparse.Namespace) -> int:
    """Handle audit command."""
    print(f"\nAuditing definitions in {args.file}...")
    root = load_root(args.file)
    issues = audit_definitions(root)
    if args.markup:
        issues.extend(audit_definition_markup(root))

    for issue in issues:
        where = f"{issue.lemma} > {issue.subentry}" if issue.subentry else issue.lemma
        print(f"  [{issue.type.value}] {where}: {issue.details}")
        if issue.content_preview:
            print(f"         {issue.content_preview}")

    print(f"\nFound {len(issues)} issue(s)")

    if args.output:
        write_report(issues, args.output)
        print(f"Report saved to {args.output}")
    return 0


def cmd_check_patches(args: argparse.Namespace) -> int:
    """Handle check-patches command."""
    table = _load_table(args.patch_table)
    source = table.source_file or "packaged table"
    print(f"\nChecking {source} against {args.file}...")

    root = load_root(args.file)
    issues = audit_definitions(root) + audit_definition_markup(root)
    result = validate_patch_table(table, issues)

    print(f"  Headwords: {len(table)}")
    print(f"  Findings:  {len(issues)}")
    print("\nValidation Results:")
    _print_validation_result(result)

    if result.is_valid:
        print(f"\nValidation passed with {result.warning_count} warning(s)")
        return 0
    print(f"\nFound {result.error_count} error(s), {result.warning_count} warning(s)")
    return 1


def cmd_suggest_patches(args: argparse.Namespace) -> int:
    """Handle suggest-patches command."""
    root = load_root(args.file)
    issues = audit_definitions(root) + audit_definition_markup(root)
    table = suggest_patch_table(
        issues,
        description=f"Draft generated from audit of {args.file.name}",
    )
    output = dump_patch_table(table)

    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote draft for {len(table)} headwords to {args.output}")
    else:
        print(output)
    return 0


def _print_validation_result(result: ValidationResult) -> None:
    """Print validation errors and warnings."""
    for error in result.errors:
        print(f"  [ERROR] {error.headword} ({error.operation}): {error.message}")
        if error.field:
            print(f"          Field: {error.field}")

    for warning in result.warnings:
        op = f" ({warning.operation})" if warning.operation else ""
        print(f"  [WARN]  {warning.headword}{op}: {warning.message}")


if __name__ == "__main__":
    sys.exit(main())

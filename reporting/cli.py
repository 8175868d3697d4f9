#!/usr/bin/env python3
"""
CLI for generating construction project report PDFs.

Usage:
    python -m reporting.cli sample [-o out.pdf]
    python -m reporting.cli generate <project_json> [-o out.pdf]
    python -m reporting.cli materials <project_json> [-o out.pdf]

Examples:
    # Generate sample report for testing
    python -m reporting.cli sample

    # Generate from a JSON export of a project and its materials
    python -m reporting.cli generate exports/project_0117.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from core.models import Material, Project, create_sample_project, parse_report_payload
from utils.config import Config

from .errors import ReportGenerationError
from .pdf_generator import ReportGenerator


logger = logging.getLogger(__name__)


def load_payload(path: Path) -> tuple[Optional[Project], list[Material]]:
    """
    Read a project JSON file.

    Args:
        path: File holding {"project": {...}, "materials": [...]} or a
            project object with an embedded "materials" list.

    Returns:
        (Project, materials) tuple; the project is None for {"project": null}

    Raises:
        ValueError: If the file is not valid JSON or not a project payload.
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object at the top level")
    return parse_report_payload(data)


def default_output_path(config: Config, project: Project, prefix: str = "project_report") -> Path:
    """reports/<prefix>_<project id>.pdf"""
    ident = project.id or "project"
    return Path(config.output_dir) / f"{prefix}_{ident}.pdf"


def write_report(data: bytes, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def _build(project: Project, materials: list[Material], output: Optional[str],
           materials_list: bool = False) -> int:
    config = Config.load()
    generator = ReportGenerator(config)

    if materials_list:
        coro = generator.generate_materials_list_report(project, materials)
        prefix = "materials_list"
    else:
        coro = generator.generate_report(project, materials)
        prefix = "project_report"

    try:
        data = asyncio.run(coro)
    except ReportGenerationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    path = Path(output) if output else default_output_path(config, project, prefix)
    write_report(data, path)
    print(f"Report generated: {path} ({len(data)} bytes)")
    return 0


def cmd_sample(args):
    """Generate a sample project report for testing."""
    print("Generating sample project report...")
    project, materials = create_sample_project()
    return _build(project, materials, args.output)


def _load_or_fail(args):
    input_path = Path(args.project_file)

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return None

    print(f"Loading project from: {input_path}")
    try:
        payload = load_payload(input_path)
    except (KeyError, ValueError) as e:
        print(f"Error: Invalid project data: {e}", file=sys.stderr)
        return None

    if payload[0] is None:
        print("Error: Project not found in payload", file=sys.stderr)
        return None
    return payload


def cmd_generate(args):
    """Generate a project report from a JSON file."""
    payload = _load_or_fail(args)
    if payload is None:
        return 1
    project, materials = payload
    print(f"Generating report for: {project.name} ({len(materials)} materials)")
    return _build(project, materials, args.output)


def cmd_materials(args):
    """Generate a materials list from a JSON file."""
    payload = _load_or_fail(args)
    if payload is None:
        return 1
    project, materials = payload
    print(f"Generating materials list for: {project.name}")
    return _build(project, materials, args.output, materials_list=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="BuildTrack - Project Report Generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m reporting.cli sample
    python -m reporting.cli generate exports/project.json -o report.pdf
    python -m reporting.cli materials exports/project.json

Output:
    Reports are saved to: $REPORT_OUTPUT_DIR/project_report_<id>.pdf
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Sample command
    sample_parser = subparsers.add_parser(
        "sample",
        help="Generate a sample report with demo data",
    )
    sample_parser.add_argument("-o", "--output", help="Output PDF path")
    sample_parser.set_defaults(func=cmd_sample)

    # Generate command
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a project report from a JSON file",
    )
    gen_parser.add_argument("project_file", help="Path to project JSON file")
    gen_parser.add_argument("-o", "--output", help="Output PDF path")
    gen_parser.set_defaults(func=cmd_generate)

    # Materials list command
    mat_parser = subparsers.add_parser(
        "materials",
        help="Generate a materials list grouped by category",
    )
    mat_parser.add_argument("project_file", help="Path to project JSON file")
    mat_parser.add_argument("-o", "--output", help="Output PDF path")
    mat_parser.set_defaults(func=cmd_materials)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    logging.basicConfig(
        level=Config.load().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

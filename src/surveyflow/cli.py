"""
Command line entry point: `surveyflow`.

    surveyflow convert SRC DST     convert a survey between .xml, .json and .yaml
    surveyflow validate FILE       list authoring problems (exit 1 if any)
    surveyflow inspect FILE        print sections and fields
    surveyflow sample DST          write the sample survey
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from surveyflow.config import get_settings
from surveyflow.examples import build_sample_survey
from surveyflow.forms import iter_fields
from surveyflow.model import Survey
from surveyflow.serialization import (
    survey_from_json,
    survey_from_yaml,
    survey_to_json,
    survey_to_yaml,
)
from surveyflow.validation import validate_survey
from surveyflow.xml_codec import survey_from_xml, survey_to_xml

logger = logging.getLogger(__name__)

FORMATS = {".xml": "xml", ".json": "json", ".yaml": "yaml", ".yml": "yaml"}


class CLIError(Exception):
    """Raised for bad input files; reported without a traceback."""


class UndecodableSurveyError(CLIError):
    """The file exists but does not hold a readable survey."""


def _format_of(path: Path) -> str:
    fmt = FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise CLIError(f"Unsupported file type '{path.suffix}' (use .xml, .json or .yaml)")
    return fmt


def read_survey(path: Path) -> Survey:
    if not path.exists():
        raise CLIError(f"File not found: {path}")
    fmt = _format_of(path)
    text = path.read_text(encoding="utf-8")

    if fmt == "xml":
        survey = survey_from_xml(text)
        if survey is None:
            raise UndecodableSurveyError(f"{path} is not a survey XML document")
        return survey

    try:
        return survey_from_json(text) if fmt == "json" else survey_from_yaml(text)
    except (ValueError, KeyError, TypeError, AttributeError, yaml.YAMLError) as exc:
        raise UndecodableSurveyError(f"Could not read {path}: {exc}") from exc


def write_survey(survey: Survey, path: Path) -> None:
    fmt = _format_of(path)
    if fmt == "xml":
        text = survey_to_xml(survey, indent=get_settings().xml_indent)
    elif fmt == "json":
        text = survey_to_json(survey, indent=2)
    else:
        text = survey_to_yaml(survey)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote %s", path)


def cmd_convert(args: argparse.Namespace) -> int:
    survey = read_survey(Path(args.src))
    write_survey(survey, Path(args.dst))
    print(f"Converted {args.src} -> {args.dst}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        survey = read_survey(Path(args.file))
    except UndecodableSurveyError as exc:
        print(f"{args.file}: 1 problem(s)")
        print(f"  - {exc}")
        return 1
    result = validate_survey(survey)
    if result.is_valid:
        print(f"{args.file}: OK")
        return 0
    print(f"{args.file}: {len(result.errors)} problem(s)")
    for error in result.errors:
        print(f"  - {error}")
    return 1


def cmd_inspect(args: argparse.Namespace) -> int:
    survey = read_survey(Path(args.file))
    print(f"Survey: {survey.id}  \"{survey.title}\"")
    if survey.metadata is not None:
        m = survey.metadata
        print(f"  version {m.version or '-'}, created {m.created or '-'}, author {m.author or '-'}")
    for section in survey.sections:
        print(f"\n[{section.id}] {section.title} ({len(section.questions)} question(s))")
    print()
    for f in iter_fields(survey):
        flags = "*" if f.required else " "
        extra = f"  options={list(f.options)}" if f.options else ""
        print(f" {flags} {f.section_id}/{f.question_id} <{f.type}> {f.label}{extra}")
    return 0


def cmd_sample(args: argparse.Namespace) -> int:
    write_survey(build_sample_survey(), Path(args.dst))
    print(f"Sample survey written to {args.dst}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="surveyflow", description="Survey XML tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("convert", help="Convert a survey between XML, JSON and YAML")
    p.add_argument("src", help="Source file (.xml, .json, .yaml)")
    p.add_argument("dst", help="Destination file (.xml, .json, .yaml)")
    p.set_defaults(func=cmd_convert)

    p = sub.add_parser("validate", help="Check a survey for authoring problems")
    p.add_argument("file")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("inspect", help="Print the sections and fields of a survey")
    p.add_argument("file")
    p.set_defaults(func=cmd_inspect)

    p = sub.add_parser("sample", help="Write the sample survey")
    p.add_argument("dst")
    p.set_defaults(func=cmd_sample)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else get_settings().log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.func(args)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

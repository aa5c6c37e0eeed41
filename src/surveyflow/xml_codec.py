"""
XML codec for Survey objects.

Converts a Survey to XML text and back.

Document grammar:
    <survey id="...">
      <title/> <description/>
      <metadata> <created/> <version/> <author/> </metadata>      (optional)
      <section id="...">
        <title/> <description/>                                   (description optional)
        <question id="..." type="..." required="true|false">
          <label/> <placeholder/>                                 (placeholder optional)
          <options> <option/>... </options>                       (optional)
          <validation> <min/> <max/> </validation>                (optional)
        </question>
      </section>
    </survey>

Decoding is tolerant: a malformed document is a normal outcome and yields
None rather than an exception.

Round-trip gaps (intentional):
    - blank options are written but dropped when read back
    - Validation.pattern is neither written nor read
"""
from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Union
from xml.sax.saxutils import escape

from surveyflow.model import (
    Number,
    Question,
    Section,
    Survey,
    SurveyMetadata,
    Validation,
    TEXT,
)

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# saxutils.escape already handles &, < and >
_QUOTE_ENTITIES = {'"': "&quot;", "'": "&#39;"}

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def escape_xml(value: object) -> str:
    """Escape &, <, >, " and ' for use in XML text or attribute values."""
    if value is None:
        return ""
    return escape(str(value), _QUOTE_ENTITIES)


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# ENCODE
# =============================================================================


def _text_element(tag: str, value: object, depth: int, indent: str) -> str:
    return f"{indent * depth}<{tag}>{escape_xml(value)}</{tag}>"


def _metadata_lines(metadata: SurveyMetadata, depth: int, indent: str) -> List[str]:
    lines = [f"{indent * depth}<metadata>"]
    for tag in ("created", "version", "author"):
        value = getattr(metadata, tag)
        if value:
            lines.append(_text_element(tag, value, depth + 1, indent))
    lines.append(f"{indent * depth}</metadata>")
    return lines


def _question_lines(question: Question, depth: int, indent: str) -> List[str]:
    pad = indent * depth
    required = "true" if question.required else "false"
    lines = [
        f'{pad}<question id="{escape_xml(question.id)}" type="{escape_xml(question.type)}" '
        f'required="{required}">',
        _text_element("label", question.label, depth + 1, indent),
    ]

    if question.placeholder:
        lines.append(_text_element("placeholder", question.placeholder, depth + 1, indent))

    if question.options:
        lines.append(f"{pad}{indent}<options>")
        for option in question.options:
            lines.append(_text_element("option", option or "", depth + 2, indent))
        lines.append(f"{pad}{indent}</options>")

    validation = question.validation
    if validation is not None and (validation.min is not None or validation.max is not None):
        lines.append(f"{pad}{indent}<validation>")
        if validation.min is not None:
            lines.append(_text_element("min", _format_number(validation.min), depth + 2, indent))
        if validation.max is not None:
            lines.append(_text_element("max", _format_number(validation.max), depth + 2, indent))
        lines.append(f"{pad}{indent}</validation>")

    lines.append(f"{pad}</question>")
    return lines


def _section_lines(section: Section, depth: int, indent: str) -> List[str]:
    pad = indent * depth
    lines = [
        f'{pad}<section id="{escape_xml(section.id)}">',
        _text_element("title", section.title, depth + 1, indent),
    ]
    if section.description:
        lines.append(_text_element("description", section.description, depth + 1, indent))
    for question in section.questions:
        lines.extend(_question_lines(question, depth + 1, indent))
    lines.append(f"{pad}</section>")
    return lines


def survey_to_xml(survey: Survey, indent: str = "  ") -> str:
    """
    Serialize a Survey to an XML document.

    Args:
        survey: Survey to encode
        indent: Indentation unit per nesting level

    Returns:
        XML text, starting with an XML declaration
    """
    lines = [
        XML_DECLARATION,
        f'<survey id="{escape_xml(survey.id)}">',
        _text_element("title", survey.title, 1, indent),
        _text_element("description", survey.description or "", 1, indent),
    ]

    if survey.metadata is not None:
        lines.extend(_metadata_lines(survey.metadata, 1, indent))

    for section in survey.sections:
        lines.extend(_section_lines(section, 1, indent))

    lines.append("</survey>")
    return "\n".join(lines)


# =============================================================================
# DECODE
# =============================================================================


def _text_of(element: Optional[ET.Element]) -> str:
    if element is None:
        return ""
    return "".join(element.itertext())


def _child_text(element: ET.Element, tag: str) -> str:
    """Text of the first direct child named tag, or "" when there is none."""
    return _text_of(element.find(tag))


def _parse_int(text: str) -> Optional[int]:
    match = _LEADING_INT_RE.match(text)
    if match is None:
        return None
    return int(match.group(1))


def _find_survey_element(root: ET.Element) -> Optional[ET.Element]:
    if root.tag == "survey":
        return root
    return root.find(".//survey")


def _parse_options(question_el: ET.Element) -> List[str]:
    options_el = question_el.find("options")
    # Older documents put <option> directly under <question>
    container = options_el if options_el is not None else question_el

    options = []
    for option_el in container.findall("option"):
        text = _text_of(option_el)
        if text.strip():
            options.append(text)
    return options


def _parse_validation(question_el: ET.Element) -> Optional[Validation]:
    validation_el = question_el.find("validation")
    if validation_el is None:
        return None

    min_el = validation_el.find("min")
    max_el = validation_el.find("max")
    minimum = _parse_int(_text_of(min_el)) if min_el is not None else None
    maximum = _parse_int(_text_of(max_el)) if max_el is not None else None

    if minimum is None and maximum is None:
        return None
    return Validation(min=minimum, max=maximum)


def _parse_question(question_el: ET.Element) -> Question:
    return Question(
        id=question_el.get("id", ""),
        type=question_el.get("type") or TEXT,
        label=_child_text(question_el, "label"),
        required=question_el.get("required") == "true",
        options=_parse_options(question_el),
        placeholder=_child_text(question_el, "placeholder"),
        validation=_parse_validation(question_el),
    )


def _parse_section(section_el: ET.Element) -> Section:
    return Section(
        id=section_el.get("id", ""),
        title=_child_text(section_el, "title"),
        description=_child_text(section_el, "description"),
        questions=[_parse_question(q) for q in section_el.iter("question")],
    )


def _parse_metadata(survey_el: ET.Element) -> Optional[SurveyMetadata]:
    metadata_el = survey_el.find("metadata")
    if metadata_el is None:
        return None
    return SurveyMetadata(
        created=_child_text(metadata_el, "created"),
        version=_child_text(metadata_el, "version"),
        author=_child_text(metadata_el, "author"),
    )


def survey_from_xml(xml_text: Union[str, bytes, None]) -> Optional[Survey]:
    """
    Parse an XML document into a Survey.

    Args:
        xml_text: XML document as text or UTF-8 bytes

    Returns:
        Survey, or None if the text is not well-formed XML or holds no
        <survey> element
    """
    if not xml_text:
        logger.warning("XML parsing error: empty document")
        return None

    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        logger.warning("XML parsing error: %s", exc)
        return None

    survey_el = _find_survey_element(root)
    if survey_el is None:
        logger.warning("Survey element not found (root is <%s>)", root.tag)
        return None

    survey = Survey(
        id=survey_el.get("id", ""),
        title=_child_text(survey_el, "title"),
        description=_child_text(survey_el, "description"),
        metadata=_parse_metadata(survey_el),
        sections=[_parse_section(s) for s in survey_el.iter("section")],
    )
    logger.debug("Decoded survey %r with %d section(s)", survey.id, len(survey.sections))
    return survey


# =============================================================================
# FILES
# =============================================================================


def save_survey_xml(survey: Survey, filepath: Union[str, Path], indent: str = "  ") -> Path:
    """
    Write a survey to an XML file (UTF-8).

    Returns:
        Path written
    """
    path = Path(filepath)
    path.write_text(survey_to_xml(survey, indent=indent), encoding="utf-8")
    return path


def load_survey_xml(filepath: Union[str, Path]) -> Optional[Survey]:
    """
    Read and decode an XML survey file.

    Returns:
        Survey, or None if the file content is not a survey document

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"XML file not found: {path}")
    return survey_from_xml(path.read_bytes())


__all__ = [
    "escape_xml",
    "survey_to_xml",
    "survey_from_xml",
    "save_survey_xml",
    "load_survey_xml",
]

"""Prompt construction for the model-assisted extraction path."""

from __future__ import annotations

from typing import Iterable

from ..types import DocumentStructure, Layout

SYSTEM_INSTRUCTION = (
    "You are an expert assistant specialized in extracting contact information "
    "from production call sheets, crew lists and contact directories. "
    "Always return ONLY valid JSON: an array of contact objects, with no "
    "commentary and no markdown."
)

DOCUMENT_TYPE_HINTS: dict[str, str] = {
    "structured_table": (
        "The document is a table. Each row is usually one person; use the column "
        "headers to decide which value is the name, role, email and phone."
    ),
    "sectioned": (
        "The document is split into department sections (e.g. CREW, TALENT). "
        "Use the section heading as the department when a person has no explicit one."
    ),
    "narrative": (
        "The document is free-flowing prose. Only report people whose contact "
        "details are clearly attached to them in the text."
    ),
    "generic": (
        "Lines typically look like 'Role: Name / Phone' or 'Name | Email | Phone'."
    ),
}

PRODUCTION_HINTS: dict[str, str] = {
    "film": "This is a film production; crew titles follow film conventions (DP, 1st AD, Gaffer).",
    "television": "This is a television production; expect Showrunner and episode crew.",
    "commercial": "This is a commercial shoot; agency and client contacts are relevant.",
    "photography": "This is a photo shoot; expect Photographer, Digitech, Stylist, HMUA and Models.",
    "corporate": "This is a corporate production; client and account contacts are relevant.",
    "theatre": "This is a theatre production; expect Stage Manager and rehearsal staff.",
}


def classify_document_type(structure: DocumentStructure | None) -> str:
    if structure is None:
        return "generic"
    if structure.layout is Layout.TABULAR:
        return "structured_table"
    if structure.sections:
        return "sectioned"
    if not structure.has_email_signals and not structure.has_phone_signals:
        return "narrative"
    return "generic"


def build_prompt(
    text: str,
    document_type: str = "generic",
    production_type: str | None = None,
    role_preferences: Iterable[str] = (),
) -> str:
    lines = [
        "Extract every person with contact details from the call sheet below.",
        "",
        "Return a JSON array. Each element must have these keys:",
        '  "name", "role", "email", "phone", "company", "department", "notes"',
        "Use null for anything not present. Do not invent values.",
        "Format US phone numbers as (XXX) XXX-XXXX.",
        "",
        DOCUMENT_TYPE_HINTS.get(document_type, DOCUMENT_TYPE_HINTS["generic"]),
    ]
    if production_type and production_type in PRODUCTION_HINTS:
        lines.append(PRODUCTION_HINTS[production_type])

    preferences = [p.strip() for p in role_preferences if p and p.strip()]
    if preferences:
        lines.append(
            "Pay particular attention to these roles and list them first: "
            + ", ".join(preferences) + "."
        )

    lines.extend(["", "CALL SHEET:", "<<<", text, ">>>"])
    return "\n".join(lines)

"""Model response parsing."""

from __future__ import annotations

import json
import logging
import re

from pydantic import TypeAdapter, ValidationError

from ..errors import MalformedModelResponse
from ..fast.patterns import PatternLibrary, format_phone, normalize_name
from ..schemas import ModelContact
from ..types import MODEL_ORIGIN, ContactCandidate

logger = logging.getLogger(__name__)

MODEL_BASE_CONFIDENCE = 0.7

_CONTACT = TypeAdapter(ModelContact)
_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _load_json(response: str) -> object:
    text = _FENCE.sub("", response.strip()).strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Try bare [...] first, then {"contacts": [...]}
    for pattern in (r"\[.*\]", r"\{.*\}"):
        match = re.search(pattern, text, re.DOTALL)
        if not match:
            continue
        try:
            return json.loads(match.group())
        except json.JSONDecodeError:
            continue
    raise MalformedModelResponse("no JSON array in model response", raw=response)


def parse_model_contacts(response: str) -> list[ModelContact]:
    """Parse a model reply into validated contact objects.

    Elements that fail validation are skipped one by one, so a stray string
    or nested object does not cost the rest of the chunk.

    Raises:
        MalformedModelResponse: The reply is not a JSON contact array, or
            none of its elements is a usable contact.
    """
    data = _load_json(response)
    if isinstance(data, dict):
        data = data.get("contacts", data.get("results"))
    if not isinstance(data, list):
        raise MalformedModelResponse("model response is not a list of contacts", raw=response)

    contacts: list[ModelContact] = []
    for position, item in enumerate(data):
        try:
            contacts.append(_CONTACT.validate_python(item))
        except ValidationError as e:
            logger.warning("Skipping model contact %d: %d validation errors", position, e.error_count())
    if data and not contacts:
        raise MalformedModelResponse(f"none of {len(data)} contact objects were valid", raw=response)
    return contacts


def to_candidates(contacts: list[ModelContact], library: PatternLibrary) -> list[ContactCandidate]:
    candidates: list[ContactCandidate] = []
    for contact in contacts:
        email = library.extract_email(contact.email) if contact.email else None
        phone = None
        if contact.phone:
            phone = library.extract_phone(contact.phone) or format_phone(contact.phone)
        confidence = contact.confidence if contact.confidence is not None else MODEL_BASE_CONFIDENCE
        candidate = ContactCandidate(
            name=normalize_name(contact.name) if contact.name else None,
            email=email,
            phone=phone,
            role=contact.role,
            company=contact.company,
            department=contact.department,
            notes=contact.notes,
            confidence=confidence,
            origin=MODEL_ORIGIN,
        )
        if candidate.is_valid():
            candidates.append(candidate)
    return candidates

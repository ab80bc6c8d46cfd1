"""Production-context enhancement.

Normalizes role titles against a small industry taxonomy, infers what kind
of production a document belongs to, boosts confidence for contacts that fit
that production, and suggests key roles that are missing. Candidates are
annotated and rescored here, never dropped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Iterable

from ..types import ContactCandidate, RoleSuggestion
from .confidence import clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleInfo:
    title: str
    department: str
    level: str


def _info(title: str, department: str, level: str = "crew") -> RoleInfo:
    return RoleInfo(title=title, department=department, level=level)


_DIRECTOR = _info("Director", "Direction", "above_the_line")
_PRODUCER = _info("Producer", "Production", "above_the_line")
_CINEMATOGRAPHER = _info("Cinematographer", "Camera", "key")
_FIRST_AD = _info("First AD", "Direction", "key")
_HAIR_MAKEUP = "Hair & Makeup"

ROLE_TAXONOMY: dict[str, RoleInfo] = {
    "director": _DIRECTOR,
    "producer": _PRODUCER,
    "executive producer": _info("Executive Producer", "Production", "above_the_line"),
    "line producer": _info("Line Producer", "Production", "key"),
    "showrunner": _info("Showrunner", "Production", "above_the_line"),
    "dp": _CINEMATOGRAPHER,
    "dop": _CINEMATOGRAPHER,
    "director of photography": _CINEMATOGRAPHER,
    "cinematographer": _CINEMATOGRAPHER,
    "camera": _info("Camera Operator", "Camera"),
    "camera operator": _info("Camera Operator", "Camera"),
    "photographer": _info("Photographer", "Photography", "key"),
    "photo assistant": _info("Photo Assistant", "Photography"),
    "digital technician": _info("Digital Technician", "Photography"),
    "digitech": _info("Digital Technician", "Photography"),
    "videographer": _info("Videographer", "Camera", "key"),
    "1st ad": _FIRST_AD,
    "first ad": _FIRST_AD,
    "second ad": _info("Second AD", "Direction"),
    "assistant director": _info("Assistant Director", "Direction"),
    "script supervisor": _info("Script Supervisor", "Direction"),
    "sound": _info("Sound Mixer", "Sound", "key"),
    "sound mixer": _info("Sound Mixer", "Sound", "key"),
    "boom operator": _info("Boom Operator", "Sound"),
    "gaffer": _info("Gaffer", "Lighting", "key"),
    "electrician": _info("Electrician", "Lighting"),
    "key grip": _info("Key Grip", "Grip", "key"),
    "grip": _info("Grip", "Grip"),
    "art director": _info("Art Director", "Art", "key"),
    "production designer": _info("Production Designer", "Art", "key"),
    "editor": _info("Editor", "Post-Production", "key"),
    "production coordinator": _info("Production Coordinator", "Production"),
    "production manager": _info("Production Manager", "Production", "key"),
    "production assistant": _info("Production Assistant", "Production"),
    "location manager": _info("Location Manager", "Locations"),
    "stage manager": _info("Stage Manager", "Production", "key"),
    "stylist": _info("Stylist", "Wardrobe"),
    "wardrobe stylist": _info("Wardrobe Stylist", "Wardrobe"),
    "makeup artist": _info("Makeup Artist", _HAIR_MAKEUP),
    "hair artist": _info("Hair Artist", _HAIR_MAKEUP),
    "hair stylist": _info("Hair Stylist", _HAIR_MAKEUP),
    "hair & makeup artist": _info("Hair & Makeup Artist", _HAIR_MAKEUP),
    "casting director": _info("Casting Director", "Casting", "key"),
    "model": _info("Model", "Talent"),
    "talent": _info("Talent", "Talent"),
    "actor": _info("Actor", "Talent"),
    "client": _info("Client", "Client"),
    "account manager": _info("Account Manager", "Client"),
    "driver": _info("Driver", "Transportation"),
    "caterer": _info("Caterer", "Catering"),
}

STANDARD_ROLES: frozenset[str] = frozenset({
    "Director", "Producer", "Cinematographer", "Editor", "Sound Mixer",
    "Gaffer", "First AD", "Script Supervisor", "Production Coordinator",
    "Camera Operator", "Boom Operator", "Electrician", "Grip", "Key Grip",
    "Photographer", "Executive Producer", "Showrunner",
})

PRODUCTION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "film": ("film", "feature", "movie", "screenplay", "scene", "cinema"),
    "television": ("television", "tv", "episode", "series", "showrunner", "pilot"),
    "commercial": ("commercial", "spot", "brand", "advertising", "ad agency"),
    "photography": ("photo shoot", "photoshoot", "photographer", "editorial", "lookbook", "digitech"),
    "corporate": ("corporate", "training video", "conference", "internal video"),
    "theatre": ("theatre", "theater", "stage manager", "rehearsal", "matinee"),
}

TYPICAL_ROLES: dict[str, tuple[str, ...]] = {
    "film": ("Director", "Producer", "Cinematographer", "Editor", "Sound Mixer"),
    "television": ("Showrunner", "Executive Producer", "Director", "Producer"),
    "commercial": ("Director", "Producer", "Cinematographer", "Client"),
    "photography": ("Photographer", "Photo Assistant", "Stylist", "Makeup Artist"),
    "corporate": ("Producer", "Director", "Client", "Account Manager"),
    "theatre": ("Director", "Stage Manager", "Producer"),
    "general": ("Director", "Producer"),
}

KEY_ROLES: dict[str, frozenset[str]] = {
    "film": frozenset({"Director", "Cinematographer"}),
    "television": frozenset({"Showrunner"}),
    "commercial": frozenset({"Director", "Producer"}),
    "photography": frozenset({"Photographer"}),
    "corporate": frozenset({"Producer"}),
    "theatre": frozenset({"Director", "Stage Manager"}),
    "general": frozenset(),
}

_TITLE_INDEX = {info.title.lower(): info for info in ROLE_TAXONOMY.values()}
_ALIASES_BY_LENGTH = sorted(ROLE_TAXONOMY, key=len, reverse=True)


@dataclass(frozen=True)
class EnhancementOutcome:
    contacts: list[ContactCandidate]
    production_type: str
    suggestions: tuple[RoleSuggestion, ...]


def resolve_role(role: str | None) -> tuple[RoleInfo | None, bool]:
    """Look up *role* in the taxonomy.

    Returns the entry and whether it was an exact alias (so the title may be
    replaced) or only a keyword hit (department only).
    """
    if not role:
        return None, False
    key = " ".join(role.lower().split())
    if key in ROLE_TAXONOMY:
        return ROLE_TAXONOMY[key], True
    if key in _TITLE_INDEX:
        return _TITLE_INDEX[key], True
    for alias in _ALIASES_BY_LENGTH:
        if re.search(r"(?<![a-z])" + re.escape(alias) + r"(?![a-z])", key):
            return ROLE_TAXONOMY[alias], False
    return None, False


def infer_production_type(text: str) -> str:
    lowered = text.lower()
    best, best_count = "general", 0
    for production, keywords in PRODUCTION_KEYWORDS.items():
        count = sum(
            len(re.findall(r"(?<![a-z])" + re.escape(k) + r"(?![a-z])", lowered))
            for k in keywords
        )
        if count > best_count:
            best, best_count = production, count
    return best


def _matches_preference(role: str | None, preferences: Iterable[str]) -> bool:
    if not role:
        return False
    lowered = role.lower()
    return any(p.lower() in lowered or lowered in p.lower() for p in preferences if p.strip())


def order_by_preference(
    contacts: list[ContactCandidate],
    role_preferences: Iterable[str] = (),
) -> list[ContactCandidate]:
    """Stable partition: contacts in preferred roles first."""
    preferences = [p for p in role_preferences if p and p.strip()]
    if not preferences:
        return list(contacts)
    preferred = [c for c in contacts if _matches_preference(c.role, preferences)]
    rest = [c for c in contacts if not _matches_preference(c.role, preferences)]
    return preferred + rest


def suggest_missing_roles(
    contacts: list[ContactCandidate],
    production_type: str,
) -> tuple[RoleSuggestion, ...]:
    found = {(c.role or "").lower() for c in contacts}
    suggestions: list[RoleSuggestion] = []
    for role in TYPICAL_ROLES.get(production_type, ()):
        if role.lower() in found:
            continue
        info = _TITLE_INDEX.get(role.lower())
        suggestions.append(RoleSuggestion(
            role=role,
            department=info.department if info else "General",
            priority="high" if role in KEY_ROLES.get(production_type, frozenset()) else "medium",
            message=f"Consider adding a {role} to your contact list",
        ))
    return tuple(suggestions)


def enhance_contacts(contacts: list[ContactCandidate], text: str) -> EnhancementOutcome:
    production_type = infer_production_type(text)
    key_roles = KEY_ROLES.get(production_type, frozenset())

    enhanced: list[ContactCandidate] = []
    for contact in contacts:
        info, exact = resolve_role(contact.role)
        role = info.title if info and exact else contact.role
        boost = 0.0
        if info and info.title in STANDARD_ROLES:
            boost += 0.1
        if contact.name and contact.email and contact.phone:
            boost += 0.1
        if info and info.title in key_roles:
            boost += 0.1
        enhanced.append(replace(
            contact,
            role=role,
            department=contact.department or (info.department if info else None),
            confidence=round(clamp(contact.confidence + boost), 2),
        ))

    suggestions = suggest_missing_roles(enhanced, production_type)
    logger.debug(
        "Production type %s, %d missing-role suggestions", production_type, len(suggestions)
    )
    return EnhancementOutcome(
        contacts=enhanced,
        production_type=production_type,
        suggestions=suggestions,
    )

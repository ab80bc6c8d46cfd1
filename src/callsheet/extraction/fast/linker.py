"""Proximity linking of independently extracted field values.

Every email, phone, name and role keyword is collected with its character
offset, then values are tied together by absolute offset distance.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, replace

from ..types import ContactCandidate, PROXIMITY_ORIGIN, RawObservation, Strategy
from .patterns import PatternLibrary

DEFAULT_PROXIMITY_WINDOW = 200

FREEFORM_EMAIL_CONFIDENCE = 0.6
FREEFORM_PHONE_CONFIDENCE = 0.5


@dataclass(frozen=True)
class Observations:
    names: tuple[RawObservation, ...] = ()
    emails: tuple[RawObservation, ...] = ()
    phones: tuple[RawObservation, ...] = ()
    roles: tuple[RawObservation, ...] = ()


def collect_observations(text: str, library: PatternLibrary) -> Observations:
    def observe(matches) -> tuple[RawObservation, ...]:
        return tuple(
            RawObservation(m.field_type, m.value, m.start, m.rule.base_confidence, m.rule.name)
            for m in matches
        )

    return Observations(
        names=observe(library.find_names(text)),
        emails=observe(library.find_emails(text)),
        phones=observe(library.find_phones(text)),
        roles=observe(library.find_roles(text)),
    )


def nearest(
    position: int,
    pool: tuple[RawObservation, ...],
    window: int = DEFAULT_PROXIMITY_WINDOW,
) -> RawObservation | None:
    """Closest observation to *position* within *window* characters.

    Ties go to the earlier offset so results never depend on pool order.
    """
    best = min(pool, key=lambda o: (abs(o.position - position), o.position), default=None)
    if best is None or abs(best.position - position) > window:
        return None
    return best


def link_by_name(
    observations: Observations,
    window: int = DEFAULT_PROXIMITY_WINDOW,
) -> list[ContactCandidate]:
    """One candidate per name that has an email or phone nearby.

    A nearby role is attached too but is not enough on its own.
    """
    linked: list[ContactCandidate] = []
    for name in observations.names:
        email = nearest(name.position, observations.emails, window)
        phone = nearest(name.position, observations.phones, window)
        if email is None and phone is None:
            continue
        role = nearest(name.position, observations.roles, window)

        confidence = 0.5
        if email:
            confidence += 0.2
        if phone:
            confidence += 0.2
        if role:
            confidence += 0.1
        linked.append(
            ContactCandidate(
                name=name.value,
                email=email.value if email else None,
                phone=phone.value if phone else None,
                role=role.value if role else None,
                confidence=round(min(confidence, 1.0), 2),
                origin=PROXIMITY_ORIGIN,
            )
        )
    return linked


def attach_to_nearest_name(
    observations: Observations,
    window: int = DEFAULT_PROXIMITY_WINDOW,
) -> list[ContactCandidate]:
    """Freeform pass: each email/phone goes to the nearest name, or is dropped."""
    origin = Strategy.FREEFORM.value
    found: list[ContactCandidate] = []
    for email in observations.emails:
        name = nearest(email.position, observations.names, window)
        if name:
            found.append(ContactCandidate(
                name=name.value, email=email.value,
                confidence=FREEFORM_EMAIL_CONFIDENCE, origin=origin,
            ))
    for phone in observations.phones:
        name = nearest(phone.position, observations.names, window)
        if name:
            found.append(ContactCandidate(
                name=name.value, phone=phone.value,
                confidence=FREEFORM_PHONE_CONFIDENCE, origin=origin,
            ))
    return found


def infer_relationships(contacts: list[ContactCandidate]) -> list[ContactCandidate]:
    """Note colleagues for contacts that share a company."""
    by_company: dict[str, list[ContactCandidate]] = defaultdict(list)
    for contact in contacts:
        if contact.company and contact.name:
            by_company[contact.company.lower()].append(contact)

    annotated: list[ContactCandidate] = []
    for contact in contacts:
        group = by_company.get((contact.company or "").lower(), [])
        others = sorted(c.name for c in group if c is not contact and c.name)
        if not others:
            annotated.append(contact)
            continue
        note = f"Colleagues: {', '.join(others)}"
        notes = f"{contact.notes}; {note}" if contact.notes else note
        annotated.append(replace(contact, notes=notes))
    return annotated

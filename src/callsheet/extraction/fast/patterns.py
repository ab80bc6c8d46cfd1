"""Pattern library: typed matching rules shared by every extractor.

The library is an immutable value. Build it once with
:func:`get_pattern_library` and pass it into strategy functions; nothing in
here keeps per-document state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from ..types import FieldType

Fields = dict[str, str | None]


# ---------------------------------------------------------------------------
# Rule containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MatchRule:
    """A single typed matcher with its trust weight."""
    field_type: FieldType
    name: str
    pattern: re.Pattern[str]
    base_confidence: float
    context_keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class LineRule:
    """A whole-line contact layout (``Role: Name / Phone`` and friends).

    ``builder`` maps a regex match onto contact fields, or returns None when
    the match turns out not to describe a person so the cascade continues.
    """
    name: str
    pattern: re.Pattern[str]
    base_confidence: float
    builder: Callable[[re.Match[str], "PatternLibrary"], Fields | None]


@dataclass(frozen=True)
class Match:
    field_type: FieldType
    value: str
    start: int
    end: int
    rule: MatchRule


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

# Most specific first; the first keyword found in a string decides the title.
ROLE_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("director of photography", "Director of Photography"),
    ("first assistant director", "First AD"),
    ("1st ad", "First AD"),
    ("first ad", "First AD"),
    ("2nd ad", "Second AD"),
    ("second ad", "Second AD"),
    ("assistant director", "Assistant Director"),
    ("executive producer", "Executive Producer"),
    ("line producer", "Line Producer"),
    ("casting director", "Casting Director"),
    ("creative director", "Creative Director"),
    ("art director", "Art Director"),
    ("production designer", "Production Designer"),
    ("production coordinator", "Production Coordinator"),
    ("production manager", "Production Manager"),
    ("production assistant", "Production Assistant"),
    ("script supervisor", "Script Supervisor"),
    ("location manager", "Location Manager"),
    ("camera operator", "Camera Operator"),
    ("boom operator", "Boom Operator"),
    ("sound mixer", "Sound Mixer"),
    ("key grip", "Key Grip"),
    ("photo assistant", "Photo Assistant"),
    ("digital tech", "Digital Technician"),
    ("digitech", "Digital Technician"),
    ("hair & makeup", "Hair & Makeup Artist"),
    ("hair and makeup", "Hair & Makeup Artist"),
    ("hmua", "Hair & Makeup Artist"),
    ("makeup artist", "Makeup Artist"),
    ("hair stylist", "Hair Stylist"),
    ("wardrobe stylist", "Wardrobe Stylist"),
    ("showrunner", "Showrunner"),
    ("cinematographer", "Cinematographer"),
    ("photographer", "Photographer"),
    ("videographer", "Videographer"),
    ("dp", "Director of Photography"),
    ("director", "Director"),
    ("producer", "Producer"),
    ("casting", "Casting Director"),
    ("editor", "Editor"),
    ("gaffer", "Gaffer"),
    ("electrician", "Electrician"),
    ("grip", "Grip"),
    ("stylist", "Stylist"),
    ("makeup", "Makeup Artist"),
    ("mua", "Makeup Artist"),
    ("hair", "Hair Artist"),
    ("hua", "Hair Artist"),
    ("model", "Model"),
    ("talent", "Talent"),
    ("driver", "Driver"),
    ("caterer", "Caterer"),
    ("catering", "Caterer"),
    ("assistant", "Production Assistant"),
)

HEADER_KEYWORDS: frozenset[str] = frozenset({
    "name", "email", "e-mail", "phone", "tel", "mobile", "cell", "role",
    "position", "title", "company", "contact", "department", "dept", "agency",
})

SECTION_WORDS: frozenset[str] = frozenset({
    "crew", "talent", "client", "clients", "production", "cast", "staff",
    "team", "contact", "contacts", "wardrobe", "camera", "sound", "lighting",
    "grip", "electric", "models", "actors", "presenters", "voice",
})

COMPANY_SUFFIXES: tuple[str, ...] = (
    "Inc", "LLC", "Ltd", "Corp", "Studio", "Studios", "Production",
    "Productions", "Agency", "Management", "Film", "Films", "Pictures",
    "Media", "Rental", "Rentals", "Entertainment", "Group",
)

_CALL_SHEET_WORDS = (
    "am pm tbd tba none remote location call time date shoot project notes "
    "note important please list sheet day office main unit base parking lunch "
    "breakfast wrap set weather sunrise sunset hospital nearest address street "
    "avenue suite floor the and of for to at on in with number artist key "
    "monday tuesday wednesday thursday friday saturday sunday january february "
    "march july september october november december"
)

# Exact strings that can never be a person.
STOP_NAMES: frozenset[str] = frozenset({
    "am", "pm", "tbd", "tba", "n/a", "na", "none", "remote", "location",
    "unknown", "various",
})


def _build_non_name_words() -> frozenset[str]:
    words: set[str] = set(_CALL_SHEET_WORDS.split())
    words |= HEADER_KEYWORDS | SECTION_WORDS
    words |= {s.lower() for s in COMPANY_SUFFIXES}
    for keyword, title in ROLE_KEYWORDS:
        words.update(re.findall(r"[a-z]+", keyword))
        words.update(re.findall(r"[a-z]+", title.lower()))
    return frozenset(words)


NON_NAME_WORDS = _build_non_name_words()


# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

_EMAIL_STANDARD = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_EMAIL_OBFUSCATED = re.compile(
    r"\b([A-Za-z0-9._%+-]+)\s*[\[(]\s*at\s*[\])]\s*"
    r"([A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*)\s*[\[(]\s*dot\s*[\])]\s*([A-Za-z]{2,})\b",
    re.IGNORECASE,
)

_NANP = r"(?:\+?1[-.\s]?)?\(?(\d{3})\)?[-.\s]?(\d{3})[-.\s]?(\d{4})"
_PHONE_NANP_EXT = re.compile(
    r"(?<![\d+])" + _NANP + r"\s*(?:ext\.?|x|#)\s*(\d{1,5})\b", re.IGNORECASE
)
_PHONE_INTL = re.compile(r"(?<![\w+])\+(?!1\b)(?!1[-.\s(]?\d{3})\d{1,3}(?:[-.\s]?\(?\d{1,4}\)?){2,5}(?!\d)")
_PHONE_NANP = re.compile(r"(?<![\d+])" + _NANP + r"(?!\d)")

_NAME_LAST_FIRST = re.compile(r"\b([A-Z][a-z]+),[ \t]+([A-Z][a-z]+)\b")
_NAME_ALL_CAPS = re.compile(r"\b[A-Z][A-Z'’-]+(?:[ \t]+[A-Z][A-Z'’-]+)+\b")
_NAME_TITLE = re.compile(r"\b[A-Z][A-Za-z'’-]+(?:[ \t]+[A-Z][A-Za-z'’-]+)+\b")

_COMPANY = re.compile(
    r"\b((?:[A-Z][\w&'.-]*[ \t]+){1,4}(?:" + "|".join(COMPANY_SUFFIXES) + r")\b\.?)"
)

_LABEL_PREFIX = re.compile(r"^\s*([^:]{2,40}):\s*")
_ROLE_LABEL = re.compile(r"^\s*role\s*:\s*", re.IGNORECASE)
_ROLE_LABEL_TEXT = re.compile(r"[A-Za-z0-9][A-Za-z0-9 &'./-]{0,39}")
_STRIP_EMAIL = re.compile(r"\S+@\S+")
_STRIP_PHONE = re.compile(r"\+?[\d\s\-().]{10,}")
_NAME_DELIMITER = re.compile(r"\s*(?:[/|\t•–—,(]|\s-\s|\s{2,})\s*")
_WORD = re.compile(r"[^\W\d_]+(?:['’][^\W\d_]+)?")

_SKIP_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^(call time|crew call|general call|location|date|shoot date|project|job|"
        r"weather|sunrise|sunset|parking|nearest hospital|hospital|address)\s*:",
        r"^(note|notes|important|please|contact for|send to)\s*:",
        r"^\d{1,2}:\d{2}\s*(am|pm)?\b",
        r"^\d{1,2}\s*(am|pm)\b",
        r"^(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b",
        r"^(table|row|column|page)\b",
    )
)
_DIGITS_ONLY = re.compile(r"^[\d\s\-/.,]+$")

SECTION_HEADER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(CREW|TALENT|CLIENTS?|PRODUCTION|CAST|STAFF|TEAM|CONTACTS?)\b", re.IGNORECASE),
    re.compile(r"^(Hair & Makeup|Hair and Makeup|Wardrobe|Camera|Sound|Lighting|Grip|Electric)\b", re.IGNORECASE),
    re.compile(r"^(Models?|Actors?|Presenters?|Voice)\b", re.IGNORECASE),
)

# Words allowed after a section keyword ("CREW LIST", "Camera Department").
_SECTION_FILLER: frozenset[str] = SECTION_WORDS | {
    "list", "department", "dept", "info", "information", "and", "sheet",
    "directory", "makeup", "hair", "members",
}

CANDIDATE_DELIMITERS: tuple[str, ...] = ("/", "|", "\t", "  ", "-", "–", "—", "•")


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------


def _title_run(match: re.Match[str]) -> str:
    word = match.group(0)
    return word[0].upper() + word[1:].lower()


def normalize_name(name: str) -> str:
    """Collapse whitespace and fix ALL-CAPS casing.

    Mixed-case input is left alone so ``McDonald`` survives.
    """
    collapsed = " ".join(name.split()).strip(" \t,;:|/-–—•")
    if collapsed and collapsed == collapsed.upper() and any(c.isalpha() for c in collapsed):
        return re.sub(r"[^\W\d_]+", _title_run, collapsed)
    return collapsed


def phone_digits(phone: str) -> str:
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    return digits


def format_phone(raw: str) -> str:
    """Format NANP numbers as ``(XXX) XXX-XXXX``; anything else is trimmed."""
    digits = phone_digits(raw)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return " ".join(raw.split())


def _words(text: str) -> list[str]:
    return _WORD.findall(text)


_NAME_PARTICLES = frozenset({"van", "von", "de", "da", "del", "della", "di", "du", "la", "le", "bin", "al"})


def _is_capitalized(text: str) -> bool:
    words = text.split()
    return 0 < len(words) <= 4 and all(w[0].isupper() or w.lower() in _NAME_PARTICLES for w in words)


# ---------------------------------------------------------------------------
# Rule builders for the contact-line cascade
# ---------------------------------------------------------------------------


def _contact_values(text: str, lib: "PatternLibrary") -> Fields:
    return {"email": lib.extract_email(text), "phone": lib.extract_phone(text)}


def _build_role_name_company_phone(m: re.Match[str], lib: "PatternLibrary") -> Fields | None:
    label, raw_name, third, fourth = (g.strip() for g in m.groups())
    if not lib.is_role_label(label) or not lib.looks_like_name(raw_name):
        return None
    fields = _contact_values(f"{third} / {fourth}", lib)
    if not (fields["email"] or fields["phone"]):
        return None
    if not (lib.extract_email(third) or lib.extract_phone(third)):
        fields["company"] = third
    fields["name"] = normalize_name(raw_name)
    fields["role"] = lib.role_from_label(label)
    return fields


def _build_role_name_phone(m: re.Match[str], lib: "PatternLibrary") -> Fields | None:
    label, raw_name, rest = (g.strip() for g in m.groups())
    if not lib.is_role_label(label) or not lib.looks_like_name(raw_name):
        return None
    fields = _contact_values(rest, lib)
    if not (fields["email"] or fields["phone"]):
        return None
    fields["name"] = normalize_name(raw_name)
    fields["role"] = lib.role_from_label(label)
    fields["company"] = lib.extract_company(rest)
    return fields


def _build_pipe_fields(m: re.Match[str], lib: "PatternLibrary") -> Fields | None:
    cells = [c.strip() for c in m.group(0).split("|") if c.strip()]
    if lib.is_header_row(cells):
        return None
    fields = lib.sniff_cells(cells)
    if not (fields.get("email") or fields.get("phone")):
        return None
    return fields


def _build_wide_whitespace(m: re.Match[str], lib: "PatternLibrary") -> Fields | None:
    raw_name, raw_email, rest = (g.strip() for g in m.groups())
    email = lib.extract_email(raw_email)
    if not email or not lib.looks_like_name(raw_name):
        return None
    return {
        "name": normalize_name(raw_name),
        "email": email,
        "phone": lib.extract_phone(rest),
        "role": lib.canonical_role(rest),
    }


def _build_embedded_email(m: re.Match[str], lib: "PatternLibrary") -> Fields | None:
    before, raw_email, after = m.group(1), m.group(2), m.group(3)
    email = lib.extract_email(raw_email)
    if not email:
        return None
    return {
        "name": lib.extract_name(before),
        "email": email,
        "phone": lib.extract_phone(after) or lib.extract_phone(before),
        "role": lib.infer_role(before) or lib.canonical_role(after),
        "company": lib.extract_company(m.group(0)),
    }


def _build_name_dash_phone(m: re.Match[str], lib: "PatternLibrary") -> Fields | None:
    head, raw_phone = m.group(1), m.group(2)
    phone = lib.extract_phone(raw_phone)
    name = lib.extract_name(head)
    if not phone or not name:
        return None
    return {"name": name, "phone": phone, "role": lib.infer_role(head)}


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PatternLibrary:
    """Immutable catalog of matching rules, ordered most specific first."""
    email_rules: tuple[MatchRule, ...]
    phone_rules: tuple[MatchRule, ...]
    name_rules: tuple[MatchRule, ...]
    company_rules: tuple[MatchRule, ...]
    role_rules: tuple[tuple[MatchRule, str], ...]
    line_rules: tuple[LineRule, ...]
    role_titles: Mapping[str, str]
    non_name_words: frozenset[str] = NON_NAME_WORDS
    header_keywords: frozenset[str] = HEADER_KEYWORDS

    # -- single-value extraction -------------------------------------------

    def extract_email(self, text: str) -> str | None:
        found = self.find_emails(text)
        return found[0].value if found else None

    def extract_phone(self, text: str) -> str | None:
        found = self.find_phones(text)
        return found[0].value if found else None

    def extract_company(self, text: str) -> str | None:
        for rule in self.company_rules:
            m = rule.pattern.search(text)
            if m:
                return " ".join(m.group(1).split())
        return None

    def extract_name(self, line: str) -> str | None:
        """Best person name on a line, or None.

        Tries ALL-CAPS runs, then Title-Case runs, then whatever precedes the
        first delimiter.
        """
        cleaned = _STRIP_EMAIL.sub(" ", line)
        cleaned = _STRIP_PHONE.sub(" ", cleaned)
        cleaned = _LABEL_PREFIX.sub("", cleaned, count=1)
        for rule in self.name_rules:
            if rule.name == "last_first":
                continue
            for m in rule.pattern.finditer(cleaned):
                candidate = self.trim_name(m.group(0))
                if candidate and len(candidate.split()) >= 2 and self.looks_like_name(candidate):
                    return normalize_name(candidate)
        head = _NAME_DELIMITER.split(cleaned.strip(), maxsplit=1)[0].strip()
        if head and _is_capitalized(head) and self.looks_like_name(head):
            return normalize_name(head)
        return None

    # -- all-occurrence extraction -----------------------------------------

    def _find(self, rules: Iterable[MatchRule], text: str,
              value_of: Callable[[MatchRule, re.Match[str]], str | None]) -> list[Match]:
        found: list[Match] = []
        taken: list[tuple[int, int]] = []
        for rule in rules:
            for m in rule.pattern.finditer(text):
                start, end = m.span()
                if any(start < t_end and end > t_start for t_start, t_end in taken):
                    continue
                value = value_of(rule, m)
                if not value:
                    continue
                taken.append((start, end))
                found.append(Match(rule.field_type, value, start, end, rule))
        return sorted(found, key=lambda x: x.start)

    def find_emails(self, text: str) -> list[Match]:
        return self._find(self.email_rules, text, _email_value)

    def find_phones(self, text: str) -> list[Match]:
        found = self._find(self.phone_rules, text, _phone_value)
        # First rule wins for single lookups; keep rule order for ties.
        return sorted(found, key=lambda x: (self.phone_rules.index(x.rule), x.start))

    def find_names(self, text: str) -> list[Match]:
        def value_of(rule: MatchRule, m: re.Match[str]) -> str | None:
            if rule.name == "last_first":
                raw = f"{m.group(2)} {m.group(1)}"
            else:
                raw = m.group(0)
            trimmed = self.trim_name(raw)
            if not trimmed or len(trimmed.split()) < 2 or not self.looks_like_name(trimmed):
                return None
            return normalize_name(trimmed)

        return self._find(self.name_rules, text, value_of)

    def find_roles(self, text: str) -> list[Match]:
        return self._find(
            [rule for rule, _ in self.role_rules], text,
            lambda rule, m: self.role_titles[rule.name],
        )

    # -- names --------------------------------------------------------------

    def trim_name(self, text: str) -> str:
        """Drop leading/trailing vocabulary words (``DIRECTOR JOHN SMITH``)."""
        tokens = text.split()
        while tokens and tokens[0].lower().strip(",:") in self.non_name_words:
            tokens.pop(0)
        while tokens and tokens[-1].lower().strip(",:") in self.non_name_words:
            tokens.pop()
        return " ".join(tokens)

    def looks_like_name(self, text: str) -> bool:
        candidate = " ".join(text.split())
        if len(candidate) < 2 or not candidate[0].isalpha():
            return False
        if candidate.lower() in STOP_NAMES or "@" in candidate:
            return False
        digits = sum(c.isdigit() for c in candidate)
        if digits > len(candidate) / 2:
            return False
        words = [w.lower() for w in _words(candidate)]
        if not words or len(words) > 5:
            return False
        return not all(w in self.non_name_words for w in words)

    # -- roles --------------------------------------------------------------

    def canonical_role(self, text: str | None) -> str | None:
        if not text:
            return None
        key = " ".join(text.lower().split())
        if key in self.role_titles:
            return self.role_titles[key]
        for rule, title in self.role_rules:
            if rule.pattern.search(text):
                return title
        return None

    def is_role_label(self, label: str) -> bool:
        label = label.strip()
        if not _ROLE_LABEL_TEXT.fullmatch(label) or not label[0].isalpha():
            return False
        lowered = label.lower()
        if lowered in self.header_keywords or lowered in {"address", "website", "fax"}:
            return False
        if self.canonical_role(label) is None and self.looks_like_name(label):
            return False
        return len(label.split()) <= 5

    def role_from_label(self, label: str) -> str:
        """Role text from a ``Label:`` prefix; known keywords get their title."""
        label = " ".join(label.split())
        return self.role_titles.get(label.lower(), label)

    def infer_role(self, line: str) -> str | None:
        text = line.strip()
        stripped = _ROLE_LABEL.sub("", text, count=1)
        if stripped != text:
            return self.canonical_role(stripped) or (stripped.strip() or None)
        prefix = _LABEL_PREFIX.match(text)
        if prefix and self.is_role_label(prefix.group(1)):
            label = prefix.group(1).strip()
            if label.lower() not in SECTION_WORDS:
                return self.role_from_label(label)
        return self.canonical_role(text)

    def is_role_line(self, line: str) -> bool:
        """True for lines that hold a role title and nothing else."""
        if self.extract_email(line) or self.extract_phone(line):
            return False
        if not self.canonical_role(line):
            return False
        words = [w.lower() for w in _words(_ROLE_LABEL.sub("", line))]
        return 0 < len(words) <= 4 and all(w in self.non_name_words for w in words)

    # -- line classification ------------------------------------------------

    def should_skip(self, line: str) -> bool:
        text = line.strip()
        if not text:
            return True
        if any(p.match(text) for p in _SKIP_PATTERNS):
            return True
        return bool(_DIGITS_ONLY.match(text)) and not self.extract_phone(text)

    def is_section_header(self, line: str) -> bool:
        text = line.strip().strip("=-*#•").strip()
        match = next((m for m in (p.match(text) for p in SECTION_HEADER_PATTERNS) if m), None)
        if match is None:
            return False
        if self.extract_email(text) or self.extract_phone(text):
            return False
        head, colon, tail = text.partition(":")
        if colon and tail.strip():
            return False
        rest = [w.lower() for w in _words(head[match.end():])]
        return len(head.split()) <= 4 and all(w in _SECTION_FILLER for w in rest)

    def is_header_row(self, cells: list[str]) -> bool:
        hits = 0
        for cell in cells:
            words = [w.lower() for w in re.findall(r"[A-Za-z-]+", cell)]
            if words and len(words) <= 3 and any(w in self.header_keywords for w in words):
                hits += 1
        if hits < 2:
            return False
        joined = " ".join(cells)
        return not (self.extract_email(joined) or self.extract_phone(joined))

    # -- composite field extraction ----------------------------------------

    def sniff_cells(self, cells: list[str]) -> Fields:
        """Assign cells to fields by content: email, phone, name, role, company."""
        fields: Fields = {}
        leftovers: list[str] = []
        for cell in cells:
            if not fields.get("email"):
                email = self.extract_email(cell)
                if email:
                    fields["email"] = email
                    continue
            if not fields.get("phone"):
                phone = self.extract_phone(cell)
                if phone:
                    fields["phone"] = phone
                    continue
            leftovers.append(cell)

        for cell in leftovers:
            if not fields.get("name") and self.looks_like_name(cell):
                fields["name"] = normalize_name(cell)
            elif not fields.get("role") and self.canonical_role(cell):
                fields["role"] = self.role_from_label(cell)
            elif not fields.get("company") and self.extract_company(cell):
                fields["company"] = self.extract_company(cell)
            elif not fields.get("role") and not any(c.isdigit() for c in cell):
                fields["role"] = " ".join(cell.split())
            elif not fields.get("company"):
                fields["company"] = " ".join(cell.split())
        return fields

    def extract_fields(self, line: str) -> tuple[Fields, float]:
        """Generic field-by-field extraction for one line.

        Returns the fields and a completeness-based confidence.
        """
        fields: Fields = {
            "name": self.extract_name(line),
            "email": self.extract_email(line),
            "phone": self.extract_phone(line),
            "role": self.infer_role(line),
            "company": self.extract_company(line),
        }
        confidence = 0.0
        if fields["name"]:
            confidence += 0.3
        if fields["email"]:
            confidence += 0.3
        if fields["phone"]:
            confidence += 0.2
        return fields, round(confidence, 2)

    def match_contact_line(self, line: str) -> tuple[LineRule, Fields] | None:
        """Run the contact-line cascade; the first rule that yields a person wins."""
        text = line.strip()
        for rule in self.line_rules:
            m = rule.pattern.match(text)
            if not m:
                continue
            fields = rule.builder(m, self)
            if fields and (fields.get("name") or fields.get("email") or fields.get("phone")):
                return rule, fields
        return None


def _email_value(rule: MatchRule, m: re.Match[str]) -> str | None:
    if rule.name == "obfuscated":
        return f"{m.group(1)}@{m.group(2)}.{m.group(3)}".lower()
    return m.group(0).lower()


def _phone_value(rule: MatchRule, m: re.Match[str]) -> str | None:
    if rule.name == "nanp_extension":
        return f"({m.group(1)}) {m.group(2)}-{m.group(3)} x{m.group(4)}"
    if rule.name == "international":
        value = " ".join(m.group(0).split())
        return value if len(re.sub(r"\D", "", value)) >= 8 else None
    return format_phone(m.group(0))


def build_pattern_library() -> PatternLibrary:
    email_rules = (
        MatchRule(FieldType.EMAIL, "standard", _EMAIL_STANDARD, 0.95, ("email", "e-mail", "mail")),
        MatchRule(FieldType.EMAIL, "obfuscated", _EMAIL_OBFUSCATED, 0.6, ("email",)),
    )
    phone_rules = (
        MatchRule(FieldType.PHONE, "nanp_extension", _PHONE_NANP_EXT, 0.95, ("phone", "tel", "ext")),
        MatchRule(FieldType.PHONE, "nanp", _PHONE_NANP, 0.9, ("phone", "tel", "cell", "mobile")),
        MatchRule(FieldType.PHONE, "international", _PHONE_INTL, 0.7, ("phone", "tel", "intl")),
    )
    name_rules = (
        MatchRule(FieldType.NAME, "last_first", _NAME_LAST_FIRST, 0.6),
        MatchRule(FieldType.NAME, "all_caps", _NAME_ALL_CAPS, 0.7),
        MatchRule(FieldType.NAME, "title_case", _NAME_TITLE, 0.6),
    )
    company_rules = (
        MatchRule(FieldType.COMPANY, "suffix", _COMPANY, 0.6, ("agency", "company", "studio")),
    )
    role_rules = tuple(
        (
            MatchRule(
                FieldType.ROLE,
                keyword,
                re.compile(r"(?<![A-Za-z])" + re.escape(keyword) + r"(?![A-Za-z])", re.IGNORECASE),
                0.8,
            ),
            title,
        )
        for keyword, title in ROLE_KEYWORDS
    )
    role_titles = {keyword: title for keyword, title in ROLE_KEYWORDS}
    role_titles.update({title.lower(): title for _, title in ROLE_KEYWORDS})

    line_rules = (
        LineRule(
            "role_name_company_phone",
            re.compile(r"^([^:/]{2,40}):\s*([A-Z][A-Z\s'.-]*?)\s*/\s*([^/]+?)\s*/\s*(.+)$", re.IGNORECASE),
            0.9,
            _build_role_name_company_phone,
        ),
        LineRule(
            "role_name_phone",
            re.compile(r"^([^:/]{2,40}):\s*([^/]+?)\s*/\s*(.+)$"),
            0.85,
            _build_role_name_phone,
        ),
        LineRule(
            "pipe_fields",
            re.compile(r"^([^|]+)\|([^|]+)\|([^|]+)\|(.+)$"),
            0.9,
            _build_pipe_fields,
        ),
        LineRule(
            "wide_whitespace",
            re.compile(r"^([A-Z][A-Za-z'.-]*(?: [A-Za-z'.-]+)*)\s{2,}(\S+@\S+)\s{2,}(.+)$"),
            0.8,
            _build_wide_whitespace,
        ),
        LineRule(
            "embedded_email",
            re.compile(r"^(.*?)[<(]?\s*([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,})\s*[>)]?(.*)$"),
            0.75,
            _build_embedded_email,
        ),
        LineRule(
            "name_dash_phone",
            re.compile(r"^([A-Za-z][A-Za-z\s'.,&:-]*?)\s*[-–—]\s*(\+?\(?\d[\d\s().-]{8,}\d)"),
            0.7,
            _build_name_dash_phone,
        ),
    )
    return PatternLibrary(
        email_rules=email_rules,
        phone_rules=phone_rules,
        name_rules=name_rules,
        company_rules=company_rules,
        role_rules=role_rules,
        line_rules=line_rules,
        role_titles=MappingProxyType(role_titles),
    )


@lru_cache(maxsize=1)
def get_pattern_library() -> PatternLibrary:
    """Process-wide library, built on first use."""
    return build_pattern_library()

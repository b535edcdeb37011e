"""Text heuristics used when laying out the CV templates."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_PATTERN = re.compile(r"\+?\(?\d[\d\s().-]{5,}\d")
LINK_MARKERS = ("http", "www.", "linkedin", "github")
CONTACT_SEPARATORS = re.compile(r"\s*[|•;]\s*")

MONTH = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?"
DATE_TOKEN = re.compile(
    rf"(?:{MONTH}\s+)?\d{{4}}|present|current|now", re.IGNORECASE
)
DATE_FILLER = re.compile(r"[\s\-–—/,.()]+")


@dataclass
class ContactDetails:
    phone: str = ""
    email: str = ""
    location: str = ""
    links: List[str] = field(default_factory=list)


def _digit_count(text: str) -> int:
    return sum(ch.isdigit() for ch in text)


def _find_phone(text: str) -> str:
    for match in PHONE_PATTERN.finditer(text):
        candidate = match.group(0).strip()
        if _digit_count(candidate) >= 7:
            return candidate
    return ""


def parse_contact_info(contact_info: str) -> ContactDetails:
    """Split a one-line contact string into phone, email, location and links."""
    details = ContactDetails()
    text = (contact_info or "").strip()
    if not text:
        return details

    email_match = EMAIL_PATTERN.search(text)
    details.email = email_match.group(0) if email_match else ""
    details.phone = _find_phone(EMAIL_PATTERN.sub(" ", text))

    for segment in CONTACT_SEPARATORS.split(text):
        segment = segment.strip()
        if not segment:
            continue
        lowered = segment.lower()
        if any(marker in lowered for marker in LINK_MARKERS) and "@" not in segment:
            details.links.append(segment)
            continue
        remainder = segment.replace(details.email, "") if details.email else segment
        if details.phone:
            remainder = remainder.replace(details.phone, "")
        remainder = remainder.strip(" ,-")
        if remainder and not details.location and _digit_count(remainder) < 7:
            details.location = remainder

    return details


def split_education_entries(education: str) -> List[List[str]]:
    """Return education entries as lists of non-empty lines.

    Entries are separated by blank lines. A single block whose lines are all
    pipe-delimited is treated as one entry per line.
    """
    blocks = [block for block in re.split(r"\n\s*\n", education or "") if block.strip()]
    entries = [[line.strip() for line in block.splitlines() if line.strip()] for block in blocks]

    if len(entries) == 1 and len(entries[0]) > 1 and all("|" in line for line in entries[0]):
        return [[line] for line in entries[0]]
    return entries


def _is_date_line(line: str) -> bool:
    if not DATE_TOKEN.search(line):
        return False
    return not DATE_FILLER.sub("", DATE_TOKEN.sub("", line))


def format_education_line(lines: List[str]) -> str:
    """Collapse an education entry to `Degree | Dates | Institution`."""
    if not lines:
        return ""
    if len(lines) == 1:
        return " | ".join(part.strip() for part in lines[0].split("|") if part.strip())

    degree, rest = lines[0], lines[1:]
    dates = next((line for line in rest if _is_date_line(line)), "")
    institution = " ".join(line for line in rest if line != dates)

    return " | ".join(part for part in (degree, dates, institution) if part)

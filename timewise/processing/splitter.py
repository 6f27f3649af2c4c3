import re
from typing import List

_SEPARATOR_RE = re.compile(r'[/+]')
_PREFIX_RE = re.compile(r'^([A-Za-z]+[\s\-]*)')


def split_course_codes(raw) -> List[str]:
    """
    Splits one grid cell's code field into independent course codes.

    "CEDX 01/07" -> ["CEDX 01", "CEDX 07"]; "MA101+102" -> ["MA101", "MA102"].
    A fragment that does not start with a letter borrows the alphabetic
    prefix of the first fragment. Empty fragments are dropped.
    """
    text = str(raw).strip() if raw is not None else ""
    if not text:
        return []

    fragments = [f.strip() for f in _SEPARATOR_RE.split(text) if f.strip()]
    if len(fragments) <= 1:
        return fragments

    match = _PREFIX_RE.match(fragments[0])
    prefix = match.group(1) if match else ""

    codes = [fragments[0]]
    for fragment in fragments[1:]:
        if prefix and not fragment[0].isalpha():
            fragment = prefix + fragment
        codes.append(fragment)
    return codes


def code_key(code: str) -> str:
    """Lookup key for legend matching: case and whitespace do not matter."""
    return re.sub(r'\s+', '', str(code)).upper()

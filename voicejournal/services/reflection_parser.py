"""Parser for the labeled-section reflection format returned by the LLM.

Grammar (labels are case-insensitive and may be wrapped in markdown bold or
prefixed with a heading marker or list number)::

    SUMMARY: <free text, may span paragraphs>
    MOOD: <one line>
    THEMES: <comma separated list>
    HIGHLIGHTS:
    - <bullet>
    - <bullet>
    LOCATION_INSIGHT: <free text>

A section runs until the next label or the end of the text. Missing
sections leave the corresponding field empty; parsing never raises.
"""

import re

from voicejournal.models.reflection import WeeklyReflection

SECTION_LABELS = ("SUMMARY", "MOOD", "THEMES", "HIGHLIGHTS", "LOCATION_INSIGHT")

_SECTION_RE = re.compile(
    r"^[ \t]*(?:#+[ \t]*)?(?:\d+\.[ \t]*)?\**[ \t]*"
    r"(SUMMARY|MOOD|THEMES|HIGHLIGHTS|LOCATION[_ ]INSIGHT)"
    r"[ \t]*\**[ \t]*:[ \t]*\**",
    re.IGNORECASE | re.MULTILINE,
)
_BULLET_RE = re.compile(r"^(?:[-*•]|\d+[.)])\s*")


def split_sections(text: str) -> dict[str, str]:
    """Map each label found in ``text`` to its raw section body (first occurrence wins)."""
    matches = list(_SECTION_RE.finditer(text))
    sections: dict[str, str] = {}
    for idx, match in enumerate(matches):
        label = match.group(1).upper().replace(" ", "_")
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(text)
        sections.setdefault(label, text[match.end():end].strip())
    return sections


def _strip_bold(value: str) -> str:
    return value.strip().strip("*").strip()


def _first_line(body: str) -> str:
    for line in body.splitlines():
        line = _strip_bold(line)
        if line:
            return line
    return ""


def _split_themes(body: str) -> list[str]:
    themes = []
    for line in body.splitlines():
        line = _BULLET_RE.sub("", line.strip())
        for part in line.split(","):
            part = _strip_bold(part).strip("[]\"'").strip()
            if part:
                themes.append(part)
    return themes


def _split_highlights(body: str) -> list[str]:
    lines = [line.strip() for line in body.splitlines() if line.strip()]
    bullets = [line for line in lines if _BULLET_RE.match(line)]
    if not bullets:
        # Un-bulleted highlights: one per line
        bullets = lines
    highlights = []
    for line in bullets:
        text = _strip_bold(_BULLET_RE.sub("", line))
        if text:
            highlights.append(text)
    return highlights


def parse_reflection(text: str | None) -> WeeklyReflection:
    """Parse an LLM response into a WeeklyReflection.

    Args:
        text: Raw response text.

    Returns:
        WeeklyReflection with every section that could be found.
    """
    if not isinstance(text, str) or not text.strip():
        return WeeklyReflection()

    sections = split_sections(text)

    summary = sections.get("SUMMARY", "").strip()
    location_insight = sections.get("LOCATION_INSIGHT", "").strip()

    return WeeklyReflection(
        summary=summary or None,
        mood_trend=_first_line(sections.get("MOOD", "")),
        key_themes=_split_themes(sections.get("THEMES", "")),
        highlights=_split_highlights(sections.get("HIGHLIGHTS", "")),
        location_insight=location_insight or None,
    )

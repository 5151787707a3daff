"""
LeetNotes Backend — Note Section Parser
=========================================

What:  Splits Gemini's free-text answer into the eight named note sections.
How:   A single line scan. Each section starts on a line beginning with one of
       the literal markers below; its body runs until the next marker line.
Who:   Called by NoteService after the Gemini text has been extracted.

Matching rules:
    - exact, case-sensitive prefix match (`line.startswith(marker)`), so a
      marker preceded by whitespace is ordinary content
    - markers are tried in SECTION_MARKERS order and the first match wins
    - text before the first marker is discarded
    - blank lines inside a section body are dropped
    - a marker seen twice keeps only the last occurrence's body
    - topic/question fall back to the caller's defaults when left empty

The function is pure and never raises; malformed input only yields empty
sections.
"""

from typing import Dict, List, Optional, Tuple

from leetnotes.schemas.note import NoteSections

SECTION_MARKERS: Tuple[Tuple[str, str], ...] = (
    ("**Topic:**", "topic"),
    ("**Question:**", "question"),
    ("**Intuition:**", "intuition"),
    ("**Example:**", "example"),
    ("**Counterexample:**", "counterexample"),
    ("**Pseudocode:**", "pseudocode"),
    ("**Mistake I Did:**", "mistake"),
    ("**Code:**", "code"),
)


def _match_marker(line: str) -> Optional[Tuple[str, str]]:
    for marker, key in SECTION_MARKERS:
        if line.startswith(marker):
            return marker, key
    return None


def parse_note_sections(
    text: str,
    default_topic: str = "",
    default_question: str = "",
) -> NoteSections:
    """
    Parse generated text into a NoteSections record.

    Args:
        text: Raw text returned by the model.
        default_topic: Used when no non-empty Topic section was found
                       (the problem title).
        default_question: Used when no non-empty Question section was found
                          (the problem description).

    Example:
        >>> parse_note_sections("**Topic:** Two Sum\\n**Code:** return [0,1];").code
        'return [0,1];'
    """
    sections: Dict[str, str] = {}
    current_key: Optional[str] = None
    buffer: List[str] = []

    for line in (text or "").split("\n"):
        matched = _match_marker(line)
        if matched is not None:
            marker, key = matched
            if current_key is not None:
                sections[current_key] = "\n".join(buffer).strip()
            current_key = key
            buffer = [line[len(marker):].strip()]
        elif current_key is not None and line.strip():
            buffer.append(line)

    if current_key is not None:
        sections[current_key] = "\n".join(buffer).strip()

    if not sections.get("topic"):
        sections["topic"] = default_topic or ""
    if not sections.get("question"):
        sections["question"] = default_question or ""

    return NoteSections(**sections)

"""
Report text assembly for observations.

The assembler turns a student's first name and the recorded entries into
draft summary and recommendations prose. Output depends only on its inputs,
so the same entry set always produces the same text.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol


POSITIVE_KEYWORDS = ("on task", "appropriate", "correct", "engaged")
TRANSITION_KEYWORDS = ("transition",)
CONCERN_KEYWORDS = ("off task", "disrupt", "refus", "redirect")

SUMMARY_LABEL = "SUMMARY:"
RECOMMENDATIONS_LABEL = "RECOMMENDATIONS:"
SECTION_SEPARATOR = f"\n\n{RECOMMENDATIONS_LABEL} "

# Splits on the first separator; summaries may not contain it
_NOTES_RE = re.compile(
    r"^SUMMARY: (?P<summary>.*?)\n\nRECOMMENDATIONS: (?P<recommendations>.*)$",
    re.DOTALL,
)


class EntryText(Protocol):
    behavior: str
    context: str


@dataclass(frozen=True)
class ReportText:
    summary: str
    recommendations: str


@dataclass(frozen=True)
class EntryTally:
    total: int
    positive: int
    transitions: int
    concerns: int


ReportAssembler = Callable[[str, Sequence[EntryText]], ReportText]


def _matches(text: str | None, keywords: Iterable[str]) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


def tally_entries(entries: Sequence[EntryText]) -> EntryTally:
    """
    Count entries per vocabulary bucket.

    Positive and concern terms are matched against the behavior only;
    transitions count when either behavior or context mentions one. An entry
    can land in more than one bucket.
    """
    positive = transitions = concerns = 0
    for entry in entries:
        if _matches(entry.behavior, POSITIVE_KEYWORDS):
            positive += 1
        if _matches(entry.behavior, TRANSITION_KEYWORDS) or _matches(
            entry.context, TRANSITION_KEYWORDS
        ):
            transitions += 1
        if _matches(entry.behavior, CONCERN_KEYWORDS):
            concerns += 1
    return EntryTally(
        total=len(entries), positive=positive, transitions=transitions, concerns=concerns
    )


def _plural(count: int, singular: str, plural: str | None = None) -> str:
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


def _summary_text(name: str, tally: EntryTally) -> str:
    if tally.total == 0:
        return (
            f"No behavioral entries were recorded for {name} during this observation. "
            "Additional observation time is needed before conclusions can be drawn."
        )

    paragraphs = [
        f"Across the full observation, {_plural(tally.total, 'behavioral entry', 'behavioral entries')} "
        f"were recorded for {name}."
    ]

    if tally.positive and tally.positive >= tally.concerns:
        paragraphs.append(
            f"{name} demonstrated consistent classroom ready behaviors, with "
            f"{_plural(tally.positive, 'entry', 'entries')} noting on-task, engaged or "
            "otherwise appropriate participation. "
            f"{name} initiated tasks after directions and managed materials independently."
        )
    elif tally.positive:
        paragraphs.append(
            f"{name} showed classroom ready behaviors in "
            f"{_plural(tally.positive, 'entry', 'entries')}, though these were less "
            "frequent than the concerns noted below."
        )

    if tally.transitions:
        paragraphs.append(
            f"{_plural(tally.transitions, 'transition')} "
            f"{'was' if tally.transitions == 1 else 'were'} observed. "
            f"{name} appears to benefit from predictable routines when moving "
            "between activities."
        )

    if tally.concerns:
        paragraphs.append(
            f"{_plural(tally.concerns, 'entry', 'entries')} described off-task, "
            "disruptive or refusal behavior, or behavior that required adult redirection."
        )
    else:
        paragraphs.append(
            "No disruptive behaviors were observed, and no signs of emotional "
            "distress or dysregulation were evident."
        )

    return "\n\n".join(paragraphs)


def _recommendations_text(name: str, tally: EntryTally) -> str:
    paragraphs = []

    if tally.concerns:
        paragraphs.append(
            "A brief cue to orient attention to the speaker or visual display at the "
            "start of directions, paired with a consistent nonverbal redirection "
            "signal, can reduce the need for verbal redirection."
        )
    else:
        paragraphs.append(
            "A brief cue to orient attention to the speaker or visual display at the "
            "start of directions can reinforce attention awareness."
        )

    if tally.transitions:
        paragraphs.append(
            "Previewing transitions with a short verbal warning and a visual schedule "
            f"will support {name}'s movement between activities."
        )

    paragraphs.append(
        "Timely performance feedback highlighting accurate responses and effective "
        "collaboration will reinforce the strengths observed during this session. "
        f"These supports align with {name}'s demonstrated ability to participate "
        "across instructional formats."
    )

    return "\n\n".join(paragraphs)


def assemble_report(student_first_name: str, entries: Sequence[EntryText]) -> ReportText:
    """Default assembler: deterministic prose driven by keyword counts."""
    name = student_first_name.strip() or "The student"
    tally = tally_entries(entries)
    return ReportText(
        summary=_summary_text(name, tally),
        recommendations=_recommendations_text(name, tally),
    )


def format_report_notes(summary: str, recommendations: str) -> str:
    """Layout used when a report is saved onto observation notes."""
    return f"{SUMMARY_LABEL} {summary}{SECTION_SEPARATOR}{recommendations}"


def parse_report_notes(notes: str | None) -> ReportText | None:
    """Recover a saved report from observation notes, or None if not a report."""
    if not notes:
        return None
    match = _NOTES_RE.match(notes)
    if not match:
        return None
    return ReportText(
        summary=match.group("summary"),
        recommendations=match.group("recommendations"),
    )

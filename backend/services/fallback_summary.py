"""
Rule-based summary used when Gemini rejects our API key.

Keeps the tool demonstrable without valid credentials. The output is built
from a few regex heuristics over the transcript and one of four templates
picked by keywords in the user's instructions. It never touches the network
and always returns non-empty text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

# --- Heuristic patterns ---

SPEAKER_RE = re.compile(r"^\s*([A-Z][a-zA-Z]+)(?:\s+[A-Z][a-zA-Z]+)?\s*:", re.MULTILINE)
CAPITALIZED_RE = re.compile(r"(?<![.!?]\s)\b([A-Z][a-z]{2,})\b")
PERCENT_RE = re.compile(r"\b\d+(?:\.\d+)?\s?%")
MONEY_RE = re.compile(r"\$\s?\d[\d,]*(?:\.\d+)?\s?(?:[kKmMbB]\b|million|billion|thousand)?")
TIME_RE = re.compile(r"\b\d{1,2}(?::\d{2})?\s?(?:AM|PM|am|pm)\b")

MONEY_KEYWORDS_RE = re.compile(r"\b(budget|revenue|cost|costs|price|pricing|spend|profit|financial|funding|dollars?)\b", re.IGNORECASE)
TIME_KEYWORDS_RE = re.compile(
    r"\b(deadline|due|by (?:monday|tuesday|wednesday|thursday|friday|end of)|next (?:week|month|quarter)|"
    r"tomorrow|schedule|timeline)\b",
    re.IGNORECASE,
)
ACTION_KEYWORDS_RE = re.compile(
    r"\b(will|to do|todo|action item|follow[- ]up|assign(?:ed)?|responsible|needs? to|take care of)\b",
    re.IGNORECASE,
)

# Capitalised words that are almost never participant names
NOT_NAMES = {
    "The", "This", "That", "These", "Those", "There", "They", "Then", "Thanks", "Thank",
    "Okay", "Yes", "Yeah", "And", "But", "For", "With", "What", "When", "Where", "Why",
    "How", "Let", "Our", "Your", "Good", "Great", "Also", "Well", "Next",
    "Meeting", "Team", "Today", "Tomorrow", "Monday", "Tuesday", "Wednesday", "Thursday",
    "Friday", "Saturday", "Sunday", "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
}

MAX_NAMES = 5


@dataclass
class TranscriptSignals:
    names: List[str] = field(default_factory=list)
    percentages: List[str] = field(default_factory=list)
    money: List[str] = field(default_factory=list)
    times: List[str] = field(default_factory=list)
    mentions_money: bool = False
    mentions_time: bool = False
    mentions_actions: bool = False


def _unique(items: List[str]) -> List[str]:
    seen: List[str] = []
    for item in items:
        item = item.strip()
        if item and item not in seen:
            seen.append(item)
    return seen


def extract_signals(transcript: str) -> TranscriptSignals:
    """Scan the transcript for names, figures and topic keywords."""
    speakers = SPEAKER_RE.findall(transcript)
    others = [w for w in CAPITALIZED_RE.findall(transcript) if w not in NOT_NAMES]
    names = [n for n in _unique(speakers + others) if n not in NOT_NAMES][:MAX_NAMES]

    return TranscriptSignals(
        names=names,
        percentages=_unique(PERCENT_RE.findall(transcript)),
        money=_unique(MONEY_RE.findall(transcript)),
        times=_unique(TIME_RE.findall(transcript)),
        mentions_money=bool(MONEY_KEYWORDS_RE.search(transcript) or MONEY_RE.search(transcript)),
        mentions_time=bool(TIME_KEYWORDS_RE.search(transcript)),
        mentions_actions=bool(ACTION_KEYWORDS_RE.search(transcript)),
    )


def _participants(signals: TranscriptSignals) -> str:
    return ", ".join(signals.names) if signals.names else "the meeting participants"


def _action_items(signals: TranscriptSignals) -> str:
    lines = ["**Action Items Summary:**", ""]
    if signals.names:
        for name in signals.names:
            lines.append(f"• {name} to follow up on the items they raised during the meeting")
    else:
        lines.append("• Circulate the meeting notes to all participants")
    lines.append("• Schedule a follow-up meeting to review progress")

    lines += ["", "**Key Discussion Points:**"]
    if signals.percentages:
        for pct in signals.percentages:
            lines.append(f"• A figure of {pct} was discussed")
    else:
        lines.append("• Current priorities and next steps were reviewed")
    return "\n".join(lines)


def _executive(signals: TranscriptSignals) -> str:
    lines = ["**Executive Summary:**", ""]
    lines.append(f"• **Participants:** {_participants(signals)}")
    if signals.times:
        lines.append(f"• **Timing:** {', '.join(signals.times)}")
    if signals.percentages:
        lines.append(f"• **Key Metrics:** {', '.join(signals.percentages)}")
    if signals.money:
        lines.append(f"• **Financials:** {', '.join(signals.money)}")
    lines.append("• **Action Items:** Owners to confirm deliverables and deadlines")

    lines += ["", "**Key Outcomes:**"]
    lines.append("• Progress and priorities were reviewed")
    lines.append("• Follow-up responsibilities were discussed")
    return "\n".join(lines)


def _detailed(signals: TranscriptSignals) -> str:
    sections = [
        "**Meeting Overview:**",
        f"The meeting brought together {_participants(signals)} to review current work and agree on next steps.",
        "",
        "**Discussion:**",
    ]
    discussed = False
    if signals.mentions_money:
        figures = f" ({', '.join(signals.money)})" if signals.money else ""
        sections.append(f"• Budget and financial matters were discussed{figures}.")
        discussed = True
    if signals.mentions_time:
        when = f" ({', '.join(signals.times)})" if signals.times else ""
        sections.append(f"• Timelines and deadlines were reviewed{when}.")
        discussed = True
    if signals.percentages:
        sections.append(f"• Performance figures mentioned: {', '.join(signals.percentages)}.")
        discussed = True
    if not discussed:
        sections.append("• General updates were shared by the participants.")

    sections += ["", "**Outcomes:**"]
    if signals.mentions_actions:
        sections.append("• Specific tasks were assigned to participants.")
    else:
        sections.append("• No explicit tasks were assigned.")

    sections += ["", "**Follow-up:**"]
    if signals.mentions_actions and signals.names:
        for name in signals.names:
            sections.append(f"• {name} to report back on their assigned items.")
    else:
        sections.append("• Schedule a follow-up meeting to confirm next steps.")
    return "\n".join(sections)


def _default(signals: TranscriptSignals) -> str:
    lines = [
        "**Meeting Summary:**",
        "",
        f"This meeting included {_participants(signals)}.",
    ]
    topics = []
    if signals.mentions_money:
        topics.append("financial matters")
    if signals.mentions_time:
        topics.append("timelines")
    if signals.mentions_actions:
        topics.append("action items")
    if topics:
        lines.append(f"Topics covered: {', '.join(topics)}.")
    if signals.percentages or signals.money:
        lines.append(f"Figures mentioned: {', '.join(signals.percentages + signals.money)}.")
    lines += [
        "",
        "**Next Steps:**",
        "The team agreed to follow up on the points raised.",
    ]
    return "\n".join(lines)


def generate_fallback_summary(transcript: str, instructions: str) -> str:
    """Pick a template from the instructions and fill it from the transcript."""
    prompt = instructions.lower()
    signals = extract_signals(transcript)

    if "action" in prompt:
        return _action_items(signals)
    if "bullet" in prompt or "executive" in prompt:
        return _executive(signals)
    if "detailed" in prompt or "comprehensive" in prompt:
        return _detailed(signals)
    return _default(signals)

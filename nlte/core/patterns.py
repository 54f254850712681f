"""
Intent Pattern Matcher

Ordered pattern bank per intent. The first pattern that matches, walking
categories then patterns in declared order, wins. There is no scoring
across alternatives, so order is part of the contract:

- within SEND, the scheduled patterns precede the immediate ones. The
  immediate pattern matches any prefix of a scheduled command and would
  shadow it otherwise.
- within STAKE, the "for N days" form precedes the bare form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .models import TransactionIntent

_AMOUNT = r"(?P<amount>\d+(?:\.\d+)?)"
_TOKEN = r"(?P<token>\w+)"
_RECIPIENT = r"(?P<recipient>\w+)"
# Whole clause up to the next whitespace; schedule.parse_time_of_day rejects
# anything it cannot read.
_TIME = r"at\s+(?P<time>\S+(?:\s+[ap]\.?m\.?)?)(?=\s|$)"


class PatternKind(str, Enum):
    """How specific a pattern is. Drives the confidence table."""
    SCHEDULED = "scheduled"
    IMMEDIATE = "immediate"
    GENERAL = "general"


@dataclass(frozen=True)
class IntentPattern:
    name: str
    intent: TransactionIntent
    kind: PatternKind
    regex: re.Pattern

    def search(self, text: str) -> Optional[re.Match]:
        return self.regex.search(text)


@dataclass(frozen=True)
class PatternMatch:
    intent: TransactionIntent
    pattern: IntentPattern
    pattern_index: int  # position in the flattened bank
    groups: Dict[str, str] = field(default_factory=dict)  # only groups that captured

    @property
    def kind(self) -> PatternKind:
        return self.pattern.kind


def _pattern(name: str, intent: TransactionIntent, kind: PatternKind, source: str) -> IntentPattern:
    return IntentPattern(
        name=name,
        intent=intent,
        kind=kind,
        regex=re.compile(r"\b" + source, re.IGNORECASE),
    )


SEND_PATTERNS: Tuple[IntentPattern, ...] = (
    _pattern(
        "send_scheduled_relative",
        TransactionIntent.SEND,
        PatternKind.SCHEDULED,
        rf"send\s+{_AMOUNT}\s+{_TOKEN}\s+to\s+{_RECIPIENT}\s+(?P<day>tomorrow|today)\s+{_TIME}",
    ),
    _pattern(
        "send_scheduled_date",
        TransactionIntent.SEND,
        PatternKind.SCHEDULED,
        rf"send\s+{_AMOUNT}\s+{_TOKEN}\s+to\s+{_RECIPIENT}\s+on\s+(?P<day>\d{{4}}-\d{{2}}-\d{{2}})\s+{_TIME}",
    ),
    _pattern(
        "send",
        TransactionIntent.SEND,
        PatternKind.IMMEDIATE,
        rf"send\s+{_AMOUNT}\s+{_TOKEN}\s+to\s+{_RECIPIENT}",
    ),
    _pattern(
        "transfer",
        TransactionIntent.SEND,
        PatternKind.IMMEDIATE,
        rf"transfer\s+{_AMOUNT}\s+{_TOKEN}\s+to\s+{_RECIPIENT}",
    ),
    _pattern(
        "pay",
        TransactionIntent.SEND,
        PatternKind.IMMEDIATE,
        rf"pay\s+{_AMOUNT}\s+{_TOKEN}\s+to\s+{_RECIPIENT}",
    ),
    _pattern(
        "give",
        TransactionIntent.SEND,
        PatternKind.IMMEDIATE,
        rf"give\s+{_RECIPIENT}\s+{_AMOUNT}\s+{_TOKEN}",
    ),
)

SWAP_PATTERNS: Tuple[IntentPattern, ...] = tuple(
    _pattern(
        verb,
        TransactionIntent.SWAP,
        PatternKind.GENERAL,
        rf"{verb}\s+{_AMOUNT}\s+(?P<from_token>\w+)\s+(?:for|to)\s+(?P<to_token>\w+)",
    )
    for verb in ("swap", "exchange", "convert", "trade")
)

STAKE_PATTERNS: Tuple[IntentPattern, ...] = (
    _pattern(
        "stake_for_days",
        TransactionIntent.STAKE,
        PatternKind.GENERAL,
        rf"stake\s+{_AMOUNT}\s+{_TOKEN}\s+for\s+(?P<duration>\d+)\s+days",
    ),
    _pattern(
        "stake",
        TransactionIntent.STAKE,
        PatternKind.GENERAL,
        rf"stake\s+{_AMOUNT}\s+{_TOKEN}",
    ),
    _pattern(
        "lock_for_days",
        TransactionIntent.STAKE,
        PatternKind.GENERAL,
        rf"lock\s+{_AMOUNT}\s+{_TOKEN}\s+for\s+(?P<duration>\d+)\s+days",
    ),
    _pattern(
        "lock",
        TransactionIntent.STAKE,
        PatternKind.GENERAL,
        rf"lock\s+{_AMOUNT}\s+{_TOKEN}",
    ),
)

CLAIM_REWARDS_PATTERNS: Tuple[IntentPattern, ...] = (
    _pattern("claim", TransactionIntent.CLAIM_REWARDS, PatternKind.GENERAL, r"claim\s+(?:my\s+)?(?:rewards|earnings)"),
    _pattern("harvest", TransactionIntent.CLAIM_REWARDS, PatternKind.GENERAL, r"harvest\s+(?:my\s+)?(?:rewards|earnings)"),
    _pattern("collect", TransactionIntent.CLAIM_REWARDS, PatternKind.GENERAL, r"collect\s+(?:my\s+)?(?:rewards|earnings)"),
)

INTENT_PATTERNS: Tuple[Tuple[TransactionIntent, Tuple[IntentPattern, ...]], ...] = (
    (TransactionIntent.SEND, SEND_PATTERNS),
    (TransactionIntent.SWAP, SWAP_PATTERNS),
    (TransactionIntent.STAKE, STAKE_PATTERNS),
    (TransactionIntent.CLAIM_REWARDS, CLAIM_REWARDS_PATTERNS),
)


def normalize_text(text: str) -> str:
    return (text or "").lower().strip()


class PatternMatcher:
    """Walks the ordered bank and returns the first hit."""

    def __init__(self, bank: Tuple[Tuple[TransactionIntent, Tuple[IntentPattern, ...]], ...] = INTENT_PATTERNS):
        self._patterns: List[IntentPattern] = [p for _, patterns in bank for p in patterns]

    @property
    def patterns(self) -> List[IntentPattern]:
        return list(self._patterns)

    def match(self, text: str) -> Optional[PatternMatch]:
        normalized = normalize_text(text)
        for index, pattern in enumerate(self._patterns):
            found = pattern.search(normalized)
            if found:
                groups = {k: v for k, v in found.groupdict().items() if v is not None}
                return PatternMatch(
                    intent=pattern.intent,
                    pattern=pattern,
                    pattern_index=index,
                    groups=groups,
                )
        return None

    def match_all(self, text: str) -> List[PatternMatch]:
        """Every pattern that would match, in bank order. Used to audit shadowing."""

        normalized = normalize_text(text)
        matches: List[PatternMatch] = []
        for index, pattern in enumerate(self._patterns):
            found = pattern.search(normalized)
            if found:
                matches.append(
                    PatternMatch(
                        intent=pattern.intent,
                        pattern=pattern,
                        pattern_index=index,
                        groups={k: v for k, v in found.groupdict().items() if v is not None},
                    )
                )
        return matches


__all__ = [
    "CLAIM_REWARDS_PATTERNS",
    "INTENT_PATTERNS",
    "IntentPattern",
    "PatternKind",
    "PatternMatch",
    "PatternMatcher",
    "SEND_PATTERNS",
    "STAKE_PATTERNS",
    "SWAP_PATTERNS",
    "normalize_text",
]

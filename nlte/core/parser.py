"""
Command Parser

Turns free text into a ``ParsedCommand``: the pattern matcher picks the
intent, the builder extracts parameters and assigns a confidence.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from .contacts import ContactResolver
from .models import NaturalLanguageCommand, ParsedCommand, TransactionIntent
from .patterns import PatternKind, PatternMatch, PatternMatcher, normalize_text
from .schedule import ScheduleError, compute_scheduled_time, parse_time_of_day
from .tokens import normalize_token

logger = logging.getLogger(__name__)


# Hand-tuned, not learned. More specific patterns get more confidence.
BASE_CONFIDENCE = 0.75
CONFIDENCE_TABLE: Dict[tuple[TransactionIntent, PatternKind], float] = {
    (TransactionIntent.SEND, PatternKind.SCHEDULED): 0.9,
    (TransactionIntent.SEND, PatternKind.IMMEDIATE): 0.85,
    (TransactionIntent.SWAP, PatternKind.GENERAL): 0.8,
    (TransactionIntent.STAKE, PatternKind.GENERAL): 0.8,
    (TransactionIntent.CLAIM_REWARDS, PatternKind.GENERAL): 0.9,
}


def confidence_for(intent: TransactionIntent, kind: PatternKind) -> float:
    return CONFIDENCE_TABLE.get((intent, kind), BASE_CONFIDENCE)


def unknown_command(text: str) -> ParsedCommand:
    return ParsedCommand(
        intent=TransactionIntent.UNKNOWN,
        parameters={},
        confidence=0.0,
        raw_command=text,
    )


class CommandBuilder:
    """Builds the parameter set for a matched pattern."""

    def __init__(self, resolver: ContactResolver):
        self.resolver = resolver

    def build(
        self,
        text: str,
        match: PatternMatch,
        user_key: Optional[str] = None,
        now_ms: Optional[int] = None,
    ) -> ParsedCommand:
        groups = match.groups
        parameters: Dict[str, Any] = {}

        if match.intent == TransactionIntent.SEND:
            parameters["amount"] = groups["amount"]
            parameters["token"] = normalize_token(groups.get("token"))
            resolution = self.resolver.resolve(groups.get("recipient", ""), user_key)
            parameters["recipient"] = resolution.recipient
            if resolution.name:
                parameters["recipient_name"] = resolution.name

            if "day" in groups:
                try:
                    hour, minute, meridiem = parse_time_of_day(groups["time"])
                    scheduled_time = compute_scheduled_time(
                        day=groups["day"],
                        hour=hour,
                        minute=minute,
                        meridiem=meridiem,
                        now_ms=now_ms,
                    )
                except ScheduleError as exc:
                    logger.warning("Rejecting scheduled send %r: %s", text, exc)
                    return unknown_command(text)
                parameters["scheduled_time"] = scheduled_time
                parameters["is_scheduled"] = True
                logger.info(
                    "Scheduled send detected: %s %s to %s at %s",
                    parameters["amount"], parameters["token"].value, parameters["recipient"], scheduled_time,
                )
            else:
                logger.info(
                    "Immediate send detected: %s %s to %s",
                    parameters["amount"], parameters["token"].value, parameters["recipient"],
                )

        elif match.intent == TransactionIntent.SWAP:
            parameters["amount"] = groups["amount"]
            parameters["from_token"] = normalize_token(groups.get("from_token"))
            parameters["to_token"] = normalize_token(groups.get("to_token"))

        elif match.intent == TransactionIntent.STAKE:
            parameters["amount"] = groups["amount"]
            parameters["token"] = normalize_token(groups.get("token"))
            if groups.get("duration"):
                parameters["stake_duration"] = int(groups["duration"])

        return ParsedCommand(
            intent=match.intent,
            parameters=parameters,
            confidence=confidence_for(match.intent, match.kind),
            raw_command=text,
        )


class CommandParser:
    """
    Entry point for parsing.

    Usage:
        parser = CommandParser(ContactResolver(ContactBook(store)))
        parsed = parser.parse(NaturalLanguageCommand(text="Send 5 cUSD to bob", timestamp=now_ms), user_key="0x...")
    """

    def __init__(
        self,
        resolver: ContactResolver,
        matcher: Optional[PatternMatcher] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.matcher = matcher or PatternMatcher()
        self.builder = CommandBuilder(resolver)
        self._clock = clock

    def parse(self, command: NaturalLanguageCommand, user_key: Optional[str] = None) -> ParsedCommand:
        text = normalize_text(command.text)
        match = self.matcher.match(text)
        if match is None:
            return unknown_command(text)
        # Relative days resolve against the moment of this parse call.
        return self.builder.build(text, match, user_key=user_key, now_ms=int(self._clock() * 1000))

    def parse_text(self, text: str, user_key: Optional[str] = None) -> ParsedCommand:
        return self.parse(
            NaturalLanguageCommand(text=text, timestamp=int(self._clock() * 1000)),
            user_key=user_key,
        )


def get_confidence_percentage(parsed: ParsedCommand) -> int:
    return round(parsed.confidence * 100)


def _param(parsed: ParsedCommand, key: str) -> Any:
    value = parsed.parameters.get(key)
    return getattr(value, "value", value)


def get_command_description(parsed: ParsedCommand) -> str:
    if parsed.intent == TransactionIntent.SEND:
        return f"Send {_param(parsed, 'amount')} {_param(parsed, 'token')} to {_param(parsed, 'recipient')}"
    if parsed.intent == TransactionIntent.SWAP:
        return f"Swap {_param(parsed, 'amount')} {_param(parsed, 'from_token')} for {_param(parsed, 'to_token')}"
    if parsed.intent == TransactionIntent.STAKE:
        return f"Stake {_param(parsed, 'amount')} {_param(parsed, 'token')}"
    if parsed.intent == TransactionIntent.CLAIM_REWARDS:
        return "Claim pending rewards"
    return "Unknown transaction"


__all__ = [
    "BASE_CONFIDENCE",
    "CONFIDENCE_TABLE",
    "CommandBuilder",
    "CommandParser",
    "confidence_for",
    "get_command_description",
    "get_confidence_percentage",
    "unknown_command",
]

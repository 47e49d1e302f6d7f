"""Conventional commit classification.

Maps commit messages to a ChangeSeverity using an ordered list of rules. The
first matching rule decides a message's severity; a batch of messages is as
severe as its most severe member.

Two rule sets ship by default:

- ``standard``: breaking change → MAJOR, ``feat`` → MINOR, ``fix`` → PATCH.
- ``dependencies``: like ``standard``, plus ``chore(deps...)`` → PATCH so
  dependency update bots produce patch releases.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Literal

from .versions import ChangeSeverity

_SCOPE = r"(\([^)\n]+\))?"

# Only the first blank line after the subject is collapsed
_SUBJECT_GAP_RE = re.compile(r"\A([^\n]*)\n\n")


@dataclass(frozen=True)
class Rule:
    """A single classification rule.

    Attributes:
        severity: Severity assigned when the rule matches.
        pattern: Regex searched for in the target text.
        target: "subject" matches against the first line only, "message"
                against the whole normalized message.
    """

    severity: ChangeSeverity
    pattern: re.Pattern[str]
    target: Literal["subject", "message"] = "subject"

    def matches(self, message: str) -> bool:
        text = first_line(message) if self.target == "subject" else message
        return self.pattern.search(text) is not None


BREAKING_EXCLAMATION = Rule(ChangeSeverity.MAJOR, re.compile(rf"^[\w-]+{_SCOPE}!: "))
BREAKING_MARKER = Rule(ChangeSeverity.MAJOR, re.compile(r"BREAKING CHANGE"), "message")
FEATURE = Rule(ChangeSeverity.MINOR, re.compile(rf"^feat{_SCOPE}: "))
FIX = Rule(ChangeSeverity.PATCH, re.compile(rf"^fix{_SCOPE}: "))
DEPENDENCY_CHORE = Rule(ChangeSeverity.PATCH, re.compile(r"^chore\(deps.*\): "))

RULE_SETS: Mapping[str, tuple[Rule, ...]] = {
    "standard": (BREAKING_EXCLAMATION, BREAKING_MARKER, FEATURE, FIX),
    "dependencies": (BREAKING_EXCLAMATION, BREAKING_MARKER, FEATURE, FIX, DEPENDENCY_CHORE),
}

DEFAULT_RULE_SET = "standard"


def normalize_message(message: str) -> str:
    """Prepare a raw commit message for matching.

    Carriage returns are removed and a blank line directly after the subject
    is collapsed, so "subject\\n\\nbody" becomes "subject\\nbody". Any later
    blank lines are left alone.
    """
    return _SUBJECT_GAP_RE.sub(r"\1\n", message.replace("\r", ""), count=1)


def first_line(message: str) -> str:
    """Return the subject line of a commit message."""
    return message.replace("\r", "").split("\n", 1)[0]


def get_rules(name: str) -> tuple[Rule, ...]:
    """Look up a named rule set.

    Raises:
        KeyError: If no rule set with that name exists.
    """
    return RULE_SETS[name]


def classify_message(
    message: str, rules: Iterable[Rule] = RULE_SETS[DEFAULT_RULE_SET]
) -> ChangeSeverity:
    """Classify one commit message; the first matching rule wins."""
    normalized = normalize_message(message)
    for rule in rules:
        if rule.matches(normalized):
            return rule.severity
    return ChangeSeverity.NONE


def classify_messages(
    messages: Iterable[str], rules: Iterable[Rule] = RULE_SETS[DEFAULT_RULE_SET]
) -> ChangeSeverity:
    """Return the highest severity across all messages (NONE when empty)."""
    rules = tuple(rules)
    return max(
        (classify_message(m, rules) for m in messages), default=ChangeSeverity.NONE
    )

"""
String predicates shared by the title and commit message rules.

All functions are pure and return True when the text violates the convention
they are named after.
"""

import re
from dataclasses import dataclass
from typing import Sequence

SENTENCE_BOUNDARY = re.compile(r"\. (?=[A-Z])")
FIRST_CAPITAL = re.compile(r"[A-Z]")
# Short alphanumeric prefix, whitespace, digits, e.g. "Pp 123", "Dev 42", "M42 7"
DEFAULT_BRANCH_NAME = re.compile(r"^[^\W_]{1,4}\s[0-9]+")
PULL_REQUEST_PHRASE = re.compile(r"pull[ -]?request\b", re.IGNORECASE)


@dataclass(frozen=True)
class MessageExemptions:
    """Which structural rules a commit message is excused from."""

    cherry_picked: bool = False
    co_authored: bool = False

    @property
    def multi_line_allowed(self) -> bool:
        return self.cherry_picked or self.co_authored

    @property
    def structure_exempt(self) -> bool:
        # Cherry-picked messages come from another repository and are not rewritten
        return self.cherry_picked


def exemptions_for(message: str, cherry_pick_prefix: str, co_author_trailer: str) -> MessageExemptions:
    return MessageExemptions(
        cherry_picked=bool(cherry_pick_prefix) and message.startswith(cherry_pick_prefix),
        co_authored=bool(co_author_trailer) and co_author_trailer in message,
    )


def lacks_leading_capital(text: str) -> bool:
    return not FIRST_CAPITAL.match(text[:1])


def ends_with_period(text: str, allowed: Sequence[str] = ("etc.",)) -> bool:
    if not text.endswith("."):
        return False
    return not any(text.endswith(abbreviation) for abbreviation in allowed)


def has_multiple_sentences(text: str, abbreviations: Sequence[str] = ("incl.", "e.g.", "etc.", "i.e.")) -> bool:
    """
    Detects a period, a space and a capital letter that is not part of an
    allowed abbreviation like "e.g. Foo".
    """
    for match in SENTENCE_BOUNDARY.finditer(text):
        preceding = text[: match.start() + 1]
        if not any(preceding.endswith(abbreviation) for abbreviation in abbreviations):
            return True
    return False


def is_multi_line(text: str) -> bool:
    return "\n" in text.strip("\n")


def looks_like_default_branch_name(title: str) -> bool:
    return bool(DEFAULT_BRANCH_NAME.match(title.lower()))


def mentions_pull_request(text: str) -> bool:
    return bool(PULL_REQUEST_PHRASE.search(text))

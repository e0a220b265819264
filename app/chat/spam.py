"""
Keyword spam scoring.

A message scores one point per distinct keyword found anywhere in its
lower-cased content; repeated occurrences of the same keyword do not add
up. Two or more points flag the message as spam. Flagged messages are still
stored and delivered, only annotated.

Usage:
    from chat.spam import score_content

    verdict = score_content("FREE bonus inside")
    verdict.score      # 2
    verdict.is_spam    # True
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from chat.constants import SPAM_CONFIG


@dataclass(frozen=True)
class SpamVerdict:
    """Result of scoring one message."""

    score: int
    is_spam: bool
    matched: tuple[str, ...] = ()


def score_content(
    content: str,
    keywords: Iterable[str] = SPAM_CONFIG.KEYWORDS,
    threshold: int = SPAM_CONFIG.THRESHOLD,
) -> SpamVerdict:
    """
    Score message content against the spam keyword set.

    Args:
        content: Raw message text
        keywords: Lower-case keywords, each worth one point when present
        threshold: Minimum score that flags the message

    Returns:
        SpamVerdict with the score, the flag and the keywords that matched
    """
    text = (content or "").lower()
    matched = tuple(dict.fromkeys(kw for kw in keywords if kw in text))
    score = len(matched)
    return SpamVerdict(score=score, is_spam=score >= threshold, matched=matched)

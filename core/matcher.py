"""
Approximate name matching over a snapshot's records.

The score is a fuzzy subsequence match: every character of the pattern must
appear in the candidate in order, ignoring case. Consecutive characters and
characters at the start of a word score higher, gaps cost a little.

``search`` only uses the score to decide inclusion: any subsequence match
scores above ``MIN_SCORE``, and results keep the snapshot's order. The
weights matter to callers that rank candidates by ``fuzzy_score``
themselves; the score is deterministic and grows with the quality of the
match.
"""
from __future__ import annotations

from typing import List, Optional

from core.models import PriceRecord, Snapshot

# A record is included when its score is above this
MIN_SCORE = 0

SCORE_MATCH = 16
BONUS_CONSECUTIVE = 8
BONUS_WORD_START = 8
PENALTY_GAP = 1


def _norm(s: Optional[str]) -> str:
    return (s or "").casefold()


def _is_word_start(text: str, index: int) -> bool:
    return index == 0 or not text[index - 1].isalnum()


def fuzzy_score(choice: str, pattern: str) -> Optional[int]:
    """
    Score how well ``pattern`` matches ``choice``.

    Returns:
        None if ``pattern`` is not a subsequence of ``choice`` (ignoring case),
        else a positive score. An empty pattern scores 1.
    """
    text = _norm(choice)
    needle = _norm(pattern)
    if not needle:
        return 1

    score = 0
    pos = 0
    prev_match = -2
    for ch in needle:
        found = text.find(ch, pos)
        if found < 0:
            return None

        score += SCORE_MATCH
        if found == prev_match + 1:
            score += BONUS_CONSECUTIVE
        elif prev_match >= 0:
            score -= PENALTY_GAP * (found - prev_match - 1)
        if _is_word_start(text, found):
            score += BONUS_WORD_START

        prev_match = found
        pos = found + 1

    return max(score, MIN_SCORE + 1)


def search(snapshot: Snapshot, query: str) -> List[PriceRecord]:
    """
    Find records whose display name approximately matches ``query``.

    Args:
        snapshot: Snapshot to search
        query: Search string; empty matches everything

    Returns:
        Matching records in snapshot order
    """
    results: List[PriceRecord] = []
    for record in snapshot.records:
        score = fuzzy_score(record.display_name, query)
        if score is not None and score > MIN_SCORE:
            results.append(record)
    return results


def find_exact(snapshot: Snapshot, name: str) -> Optional[PriceRecord]:
    """Return the first record whose display name equals ``name``."""
    for record in snapshot.records:
        if record.display_name == name:
            return record
    return None

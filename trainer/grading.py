"""Tolerant free-text answer grading.

Answers are compared on a canonical form (case-folded, quote style and
whitespace normalized, "im"/"i'm" expanded, apostrophes dropped). If no
accepted solution matches exactly, one typo (edit distance 1) is forgiven on
answers of five or more characters.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

FUZZY_MIN_LENGTH = 5
FUZZY_MAX_DISTANCE = 1

_SINGLE_QUOTES = re.compile("[‘’]")
_DOUBLE_QUOTES = re.compile("[“”]")
_WHITESPACE = re.compile(r"\s+")
_I_AM = re.compile(r"\b(?:im|i'm)\b")


@dataclass(frozen=True)
class GradeResult:
    correct: bool
    solution: str
    solutions: List[str] = field(default_factory=list)
    fuzzy: bool = False


def normalize(text: Optional[str]) -> str:
    t = (text or "").casefold()
    t = _SINGLE_QUOTES.sub("'", t)
    t = _DOUBLE_QUOTES.sub('"', t)
    return _WHITESPACE.sub(" ", t).strip()


def canonical(text: Optional[str]) -> str:
    # Curly apostrophes are already straight after normalize().
    t = _I_AM.sub("i am", normalize(text))
    return t.replace("'", "")


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit cost for insert, delete and substitute."""
    if len(a) < len(b):
        a, b = b, a
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        cur = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            cur.append(min(prev[j] + 1, cur[j - 1] + 1, prev[j - 1] + cost))
        prev = cur
    return prev[-1]


def split_solutions(accepted_spec: Optional[str]) -> List[str]:
    """'run;jog ;sprint' -> ['run', 'jog', 'sprint'] (order kept, blanks dropped)."""
    if not isinstance(accepted_spec, str):
        return []
    return [s.strip() for s in accepted_spec.split(";") if s.strip()]


def _match(raw_input: Optional[str], solutions: List[str]) -> Tuple[bool, bool]:
    """Return (matched, fuzzy)."""
    given = canonical(raw_input)
    candidates = [canonical(s) for s in solutions]

    if given in candidates:
        return True, False

    for sol in candidates:
        if min(len(given), len(sol)) < FUZZY_MIN_LENGTH:
            continue
        if levenshtein(given, sol) <= FUZZY_MAX_DISTANCE:
            return True, True
    return False, False


def is_correct(raw_input: Optional[str], accepted_spec: Optional[str]) -> bool:
    matched, _ = _match(raw_input, split_solutions(accepted_spec))
    return matched


def grade(raw_input: Optional[str], accepted_spec: Optional[str]) -> GradeResult:
    """
    Grade an answer and bundle the feedback shown to the learner.
    The first accepted solution is always reported, including on fuzzy matches,
    so the learner sees the canonical spelling and not just a verdict.
    """
    solutions = split_solutions(accepted_spec)
    matched, fuzzy = _match(raw_input, solutions)
    shown = solutions[0] if solutions else (accepted_spec if isinstance(accepted_spec, str) else "")
    return GradeResult(
        correct=matched,
        solution=shown,
        solutions=solutions,
        fuzzy=fuzzy,
    )

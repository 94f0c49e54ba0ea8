"""Scoring rules for multiple-choice questions.

Both the attempt writer and the attempt review reader score questions through
`score_question`, so a stored aggregate and a recomputed breakdown always agree.

Rules:
- single: 1.0 only when exactly one option is selected and it is correct.
- multiple: partial credit, ``hits / n_correct - misses / n_selected``,
  floored at 0. Both denominators are at least 1.
"""

from typing import Iterable, Sequence

from snapquiz.exceptions import ValidationError
from snapquiz.models import McqType


def score_question(
    mcq_type: McqType | str,
    selected_option_ids: Iterable[int],
    correct_option_ids: Iterable[int],
) -> float:
    """Return the score of one question in [0, 1].

    Args:
        mcq_type: "single" or "multiple"
        selected_option_ids: Options chosen by the user (duplicates are ignored)
        correct_option_ids: Options flagged correct for the question

    Raises:
        ValueError: If mcq_type is not one of the supported variants
    """
    mcq_type = McqType(mcq_type)
    selected = frozenset(selected_option_ids)
    correct = frozenset(correct_option_ids)

    if mcq_type is McqType.single:
        if len(selected) != 1:
            return 0.0
        return 1.0 if next(iter(selected)) in correct else 0.0

    hits = len(selected & correct)
    misses = len(selected - correct)
    raw = hits / max(len(correct), 1) - misses / max(len(selected), 1)
    return max(raw, 0.0)


def aggregate_score(question_scores: Sequence[float]) -> float:
    """Mean of per-question scores as a percentage rounded to 2 decimals."""
    if not question_scores:
        raise ValidationError("Cannot aggregate an attempt without questions")
    return round(sum(question_scores) / len(question_scores) * 100, 2)

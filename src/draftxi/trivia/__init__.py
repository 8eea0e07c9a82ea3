"""Trivia bonus questions and their effect on a draft's bonus money."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field

from draftxi.draft import DraftResult, DraftService
from draftxi.persistence import DraftStore, QuestionRecord


logger = logging.getLogger(__name__)


class TriviaQuestion(BaseModel):
    question_id: str
    question: str
    options: List[str] = Field(..., min_length=2)
    correct_answer: str
    reward_amount: int = Field(..., ge=0)

    @classmethod
    def from_record(cls, record: QuestionRecord) -> "TriviaQuestion":
        return cls(
            question_id=record.question_id,
            question=record.question,
            options=record.options,
            correct_answer=record.correct_answer,
            reward_amount=record.reward_amount,
        )

    def public_view(self) -> dict:
        return self.model_dump(exclude={"correct_answer"})


@dataclass(frozen=True)
class TriviaOutcome:
    correct: bool
    amount: int


def draw_question(store: DraftStore, rng: Optional[random.Random] = None) -> Optional[TriviaQuestion]:
    record = store.random_question(rng)
    return TriviaQuestion.from_record(record) if record is not None else None


def score_answer(question: TriviaQuestion, answer: str, *, penalty: int) -> TriviaOutcome:
    if answer.strip() == question.correct_answer:
        return TriviaOutcome(correct=True, amount=question.reward_amount)
    return TriviaOutcome(correct=False, amount=-abs(penalty))


def apply_outcome(service: DraftService, outcome: TriviaOutcome) -> DraftResult:
    """Credit ``outcome`` to the draft, never pushing purse plus bonus below zero."""

    session = service.session
    floor = -(session.purse + session.bonus_money)
    amount = max(outcome.amount, min(0, floor))
    if amount != outcome.amount:
        logger.info("Clamped trivia penalty for %s from %s to %s", session.id, outcome.amount, amount)
    return service.add_bonus(amount)

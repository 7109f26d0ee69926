"""Lesson, quiz and game content models."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from learn2go.models.timestamps import UTCDateTime, utc_now


class QuizQuestion(BaseModel):
    """A multiple-choice question embedded in a lesson."""

    id: str = ""
    question: str
    options: list[str]
    correct_answer: int = Field(ge=0)  # zero-based index into options
    explanation: str = ""

    def is_correct(self, answer: int) -> bool:
        return answer == self.correct_answer


class Lesson(BaseModel):
    """Static lesson content scoped to one (country, language) pair."""

    id: str
    title: str
    description: str = ""
    content: str = ""
    level: int = 1
    order: int = 0
    category: str = "general"
    country: str = "US"
    language: str = "en"
    quiz_questions: list[QuizQuestion] = Field(default_factory=list)
    created_at: UTCDateTime = Field(default_factory=utc_now)
    generated: bool = False

    def score_answers(self, answers: list[int]) -> int:
        """Score a quiz attempt as a 0-100 percentage.

        Unanswered questions count as wrong. A lesson without questions
        scores 100.
        """
        if not self.quiz_questions:
            return 100
        correct = sum(
            1
            for question, answer in zip(self.quiz_questions, answers)
            if question.is_correct(answer)
        )
        return round(100 * correct / len(self.quiz_questions))


class GameType(StrEnum):
    SIMULATION = "simulation"
    QUIZ = "quiz"
    MEMORY = "memory"
    SCENARIO = "scenario"


class Game(BaseModel):
    id: str
    name: str
    description: str = ""
    type: GameType = GameType.QUIZ
    content: dict[str, Any] = Field(default_factory=dict)


DEFAULT_GAME = Game(
    id="default_quiz",
    name="Traffic Safety Quiz",
    description="Test your knowledge of traffic rules",
    type=GameType.QUIZ,
    content={
        "questions": [
            {"q": "What does a red light mean?", "a": "Stop"},
            {"q": "When should you wear a seatbelt?", "a": "Always"},
            {"q": "What should you do at a stop sign?", "a": "Stop completely"},
        ]
    },
)

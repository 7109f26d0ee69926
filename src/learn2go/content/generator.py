"""LLM-generated lessons and games for enrichment during preload."""

import json
import time

import structlog
from openai import AsyncOpenAI

from learn2go.localization.countries import get_country, get_language
from learn2go.models.lesson import Game, GameType, Lesson, QuizQuestion

logger = structlog.get_logger()

LESSON_SYSTEM_PROMPT = """\
You write short road-safety lessons for learner drivers. Follow the traffic \
rules of the given country and write in the given language.

Respond ONLY with a JSON object:
{
    "title": "<lesson title>",
    "description": "<one sentence>",
    "content": "<lesson body, 3-6 short paragraphs>",
    "quiz_questions": [
        {
            "question": "<question>",
            "options": ["<a>", "<b>", "<c>", "<d>"],
            "correct_answer": <zero-based index>,
            "explanation": "<why>"
        }
    ]
}
"""

GAME_SYSTEM_PROMPT = """\
You design a tiny road-safety quiz game for learner drivers in the given \
country and language.

Respond ONLY with a JSON object:
{
    "name": "<game name>",
    "description": "<one sentence>",
    "questions": [{"q": "<question>", "a": "<short answer>"}]
}
"""


def _locale_label(country: str, language: str) -> str:
    country_def = get_country(country)
    lang_def = get_language(language)
    country_name = country_def.name if country_def else country
    lang_name = lang_def.name if lang_def else language
    return f"Country: {country_name} ({country}). Language: {lang_name} ({language})."


class ContentGenerator:
    """Generates lesson and game content with an OpenAI chat model.

    Args:
        api_key: OpenAI API key; None disables generation.
        model: Chat model identifier.
    """

    def __init__(self, api_key: str | None, model: str = "gpt-4o-mini"):
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key) if api_key else None

    @property
    def available(self) -> bool:
        return self.client is not None

    async def _complete_json(self, system_prompt: str, user_prompt: str) -> dict:
        if self.client is None:
            raise RuntimeError("Content generation is not configured")
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.7,
            response_format={"type": "json_object"},
        )
        return json.loads(response.choices[0].message.content)

    async def generate_lesson(
        self, country: str, language: str, topic: str, level: int = 1
    ) -> Lesson:
        """Generate one lesson with its quiz.

        Raises:
            RuntimeError: When generation is not configured.
            KeyError: When the model output has no title.
        """
        data = await self._complete_json(
            LESSON_SYSTEM_PROMPT,
            f"{_locale_label(country, language)} Topic: {topic}. Level: {level}.",
        )
        questions = [
            QuizQuestion(id=f"q{i + 1}", **q)
            for i, q in enumerate(data.get("quiz_questions", []))
        ]
        lesson = Lesson(
            id=f"generated_{int(time.time() * 1000)}",
            title=data["title"],
            description=data.get("description", ""),
            content=data.get("content", ""),
            level=level,
            order=100,
            category="generated",
            country=country,
            language=language,
            quiz_questions=questions,
            generated=True,
        )
        logger.info("lesson_generated", country=country, language=language, topic=topic)
        return lesson

    async def generate_game(self, country: str, language: str) -> Game:
        """Generate one quiz game."""
        data = await self._complete_json(GAME_SYSTEM_PROMPT, _locale_label(country, language))
        game = Game(
            id=f"generated_game_{int(time.time() * 1000)}",
            name=data["name"],
            description=data.get("description", ""),
            type=GameType.QUIZ,
            content={"questions": data.get("questions", [])},
        )
        logger.info("game_generated", country=country, language=language)
        return game

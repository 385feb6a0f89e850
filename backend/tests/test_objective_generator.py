"""
Tests for the objective generators and their fallback behaviour.
"""

import os
import sys
import json
import random

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain.challenge import Challenge  # noqa: E402
from domain.constants import GOAL_TYPES  # noqa: E402
import services.objective_generator as objective_generator  # noqa: E402
from services.objective_generator import (  # noqa: E402
    CANNED_CHALLENGES,
    CANNED_COMMENTARY,
    CANNED_TRIVIA,
    CannedObjectiveGenerator,
    LLMObjectiveGenerator,
    _extract_json_object,
    create_objective_generator,
)


class FakeProvider:
    """Returns queued texts (or raises queued exceptions) and records prompts."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []
        self.systems = []

    def get_response(self, prompt, system=None):
        self.prompts.append(prompt)
        self.systems.append(system)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return {"text": response, "input_tokens": 0, "output_tokens": 0}


class FixedFallback:
    def generate_challenge(self, context):
        return {"title": "fallback"}

    def generate_trivia(self, theme):
        return "fallback fact"

    def generate_commentary(self, event, score):
        return "fallback line"


VALID_CHALLENGE = {
    "title": "Points Party",
    "description": "Score 100 points in 20 seconds!",
    "goalType": "SCORE_RUSH",
    "targetValue": 100,
    "timeLimitSeconds": 20,
    "reward": {"points": 400, "powerUp": "MAGNET"},
    "failureCondition": "TIME_UP",
}


class TestCannedObjectiveGenerator:
    def test_challenge_is_valid_and_unique(self):
        generator = CannedObjectiveGenerator(rng=random.Random(3))
        first = generator.generate_challenge({})
        second = generator.generate_challenge({})

        assert first["id"] != second["id"]
        assert first["goalType"] in GOAL_TYPES
        # Parses cleanly into the engine's type
        Challenge.from_dict(first)

    def test_challenge_does_not_mutate_templates(self):
        generator = CannedObjectiveGenerator(rng=random.Random(1))
        challenge = generator.generate_challenge({})
        challenge["reward"]["points"] = 1
        assert all(t["reward"]["points"] != 1 for t in CANNED_CHALLENGES)
        assert all("id" not in t for t in CANNED_CHALLENGES)

    def test_trivia_matches_theme(self):
        generator = CannedObjectiveGenerator(rng=random.Random(0))
        assert generator.generate_trivia("lava") in CANNED_TRIVIA["lava"]

    def test_unknown_theme_falls_back_to_neon(self):
        generator = CannedObjectiveGenerator(rng=random.Random(0))
        assert generator.generate_trivia("desert") in CANNED_TRIVIA["neon"]

    @pytest.mark.parametrize("event,key", [
        ("Close Call", "close call"),
        ("Game Over", "game over"),
        ("Level Up", "default"),
    ])
    def test_commentary_by_event(self, event, key):
        generator = CannedObjectiveGenerator(rng=random.Random(0))
        assert generator.generate_commentary(event, 120) in CANNED_COMMENTARY[key]


class TestExtractJsonObject:
    def test_extracts_from_code_fence(self):
        text = "Here you go:\n```json\n" + json.dumps(VALID_CHALLENGE) + "\n```"
        assert _extract_json_object(text)["title"] == "Points Party"

    def test_rejects_text_without_object(self):
        with pytest.raises(ValueError):
            _extract_json_object("no json here")


class TestLLMObjectiveGenerator:
    def test_valid_challenge_passes_through_with_id(self):
        provider = FakeProvider(json.dumps(VALID_CHALLENGE))
        generator = LLMObjectiveGenerator(provider, fallback=FixedFallback())

        challenge = generator.generate_challenge({"score": 120})

        assert challenge["title"] == "Points Party"
        assert challenge["id"]
        assert '"score": 120' in provider.prompts[0]

    @pytest.mark.parametrize("response", [
        "I'd rather not.",
        json.dumps(dict(VALID_CHALLENGE, goalType="JUMP_AROUND")),
        json.dumps({"title": "incomplete"}),
        "",
        RuntimeError("connection reset"),
    ])
    def test_challenge_falls_back_on_bad_response(self, response):
        generator = LLMObjectiveGenerator(FakeProvider(response), fallback=FixedFallback())
        assert generator.generate_challenge({}) == {"title": "fallback"}

    def test_trivia_uses_provider_text(self):
        provider = FakeProvider("  Snakes smell with their tongues.  ")
        generator = LLMObjectiveGenerator(provider)
        assert generator.generate_trivia("jungle") == "Snakes smell with their tongues."
        assert "jungle" in provider.prompts[0]
        assert provider.systems[0] == objective_generator.TRIVIA_SYSTEM_PROMPT

    def test_trivia_falls_back_on_error(self):
        generator = LLMObjectiveGenerator(FakeProvider(TimeoutError("slow")), fallback=FixedFallback())
        assert generator.generate_trivia("jungle") == "fallback fact"

    def test_commentary_falls_back_on_empty_text(self):
        generator = LLMObjectiveGenerator(FakeProvider("   "), fallback=FixedFallback())
        assert generator.generate_commentary("Close Call", 40) == "fallback line"


class TestCreateObjectiveGenerator:
    def test_without_key_returns_canned(self, monkeypatch):
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
        assert isinstance(create_objective_generator(), CannedObjectiveGenerator)

    def test_with_key_wraps_provider(self, monkeypatch):
        provider = FakeProvider()
        monkeypatch.setenv("OPENROUTER_API_KEY", "test-key")
        monkeypatch.setattr(objective_generator, "create_llm_provider", lambda: provider)

        generator = create_objective_generator(rng=random.Random(0))

        assert isinstance(generator, LLMObjectiveGenerator)
        assert generator.provider is provider
        assert isinstance(generator.fallback, CannedObjectiveGenerator)

    def test_provider_error_returns_canned(self, monkeypatch):
        def broken():
            raise ValueError("bad config")

        monkeypatch.setenv("OPENROUTER_API_KEY", "test-key")
        monkeypatch.setattr(objective_generator, "create_llm_provider", broken)

        assert isinstance(create_objective_generator(), CannedObjectiveGenerator)

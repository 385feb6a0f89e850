"""
Objective generator: challenges, trivia and commentary for a running game.

The engine never calls this module. The session orchestrator does, off the
frame loop, and every public method here returns a usable value even when the
LLM is unreachable or answers with garbage.
"""

import json
import logging
import os
import random
import uuid
from typing import Any, Dict, List, Optional

from domain.challenge import Challenge
from domain.constants import (
    DEFAULT_THEME,
    EAT_TARGET,
    GOAL_TYPES,
    MAX_CHALLENGE_TIME_SECONDS,
    MIN_CHALLENGE_TIME_SECONDS,
    POWER_UP_KINDS,
    SLOW_MOTION,
    SURVIVE,
)
from llm_providers import LLMProviderInterface, create_llm_provider

logger = logging.getLogger(__name__)


CANNED_CHALLENGES: List[Dict[str, Any]] = [
    {
        "title": "Speed Freak",
        "description": "The snake had too much espresso! Survive the caffeine rush for 15s!",
        "goalType": SURVIVE,
        "targetValue": 15,
        "timeLimitSeconds": 15,
        "reward": {"points": 500, "powerUp": SLOW_MOTION},
        "failureCondition": "DIE",
    },
    {
        "title": "Snack Attack",
        "description": "You're HANGRY! Devour 5 pellets before you faint from starvation (20s)!",
        "goalType": EAT_TARGET,
        "targetValue": 5,
        "timeLimitSeconds": 20,
        "reward": {"points": 300},
        "failureCondition": "TIME_UP",
    },
    {
        "title": "Claustrophobia",
        "description": "The walls are looking at you funny... Don't touch them for 20s!",
        "goalType": SURVIVE,
        "targetValue": 20,
        "timeLimitSeconds": 20,
        "reward": {"points": 400},
        "failureCondition": "DIE",
    },
    {
        "title": "Diet Starts Tomorrow",
        "description": "Eat 3 pellets. No excuses! (15s)",
        "goalType": EAT_TARGET,
        "targetValue": 3,
        "timeLimitSeconds": 15,
        "reward": {"points": 250},
        "failureCondition": "TIME_UP",
    },
]

CANNED_TRIVIA: Dict[str, List[str]] = {
    "neon": [
        "Did you know? The first cyberpunk story was written in 1980 by Bruce Bethke.",
        "Neon lights were invented in 1910 by Georges Claude.",
        "The term 'Cyberspace' was coined by William Gibson in 'Neuromancer'.",
        "Blade Runner is set in 2019. We are already in the future!",
        "Synthwave music mimics 80s soundtracks but is a modern genre.",
    ],
    "jungle": [
        "Snakes can't blink! They have no eyelids.",
        "There are over 3,000 species of snakes in the world.",
        "Some snakes can glide up to 100 meters!",
        "The Titanoboa was a prehistoric snake 42 feet long.",
    ],
    "lava": [
        "Lava can reach temperatures of 1,200°C (2,200°F).",
        "Obsidian is volcanic glass formed by rapidly cooling lava.",
        "There are over 1,500 active volcanoes on Earth.",
        "Volcanic ash is good for soil fertility.",
        "Magma is lava before it erupts.",
    ],
}

CANNED_COMMENTARY: Dict[str, List[str]] = {
    "close call": ["WHOA, that was close!", "Living on the edge!", "Not today, wall!", "Scales of steel!"],
    "game over": ["OUCH!", "OOF!", "RIP", "SNAKE? SNAKE?!", "WASTED", "BONK!"],
    "default": ["Keep slithering!", "Nice moves!", "The crowd goes wild!"],
}

DESIGNER_SYSTEM_PROMPT = (
    "You design short, funny, achievable objectives for a neon arcade snake game. "
    "You always answer with a single JSON object and nothing else."
)
TRIVIA_SYSTEM_PROMPT = (
    "You are the trivia host of an arcade snake game. "
    "You answer with one short, true, family-friendly fact and no preamble."
)
ANNOUNCER_SYSTEM_PROMPT = (
    "You are a hype arcade announcer. You react in at most eight words."
)


class ObjectiveGenerator:
    """
    Interface for the challenge/trivia/commentary collaborator.

    Implementations must never raise: a failing call returns a canned value.
    """

    def generate_challenge(self, context: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError("Subclasses should implement this method.")

    def generate_trivia(self, theme: str) -> str:
        raise NotImplementedError("Subclasses should implement this method.")

    def generate_commentary(self, event: str, score: int) -> str:
        raise NotImplementedError("Subclasses should implement this method.")


class CannedObjectiveGenerator(ObjectiveGenerator):
    """Local, offline responses. Also the fallback for the LLM generator."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate_challenge(self, context: Dict[str, Any]) -> Dict[str, Any]:
        template = dict(self.rng.choice(CANNED_CHALLENGES))
        template["reward"] = dict(template["reward"])
        template["id"] = str(uuid.uuid4())
        return template

    def generate_trivia(self, theme: str) -> str:
        facts = CANNED_TRIVIA.get(theme) or CANNED_TRIVIA[DEFAULT_THEME]
        return self.rng.choice(facts)

    def generate_commentary(self, event: str, score: int) -> str:
        lines = CANNED_COMMENTARY.get(event.strip().lower(), CANNED_COMMENTARY["default"])
        return self.rng.choice(lines)


def _extract_json_object(text: str) -> Dict[str, Any]:
    """
    Pull the first {...} block out of a model response (models like to wrap
    JSON in prose or code fences).
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("Response does not contain a JSON object.")
    payload = json.loads(text[start:end + 1])
    if not isinstance(payload, dict):
        raise ValueError("Response JSON is not an object.")
    return payload


class LLMObjectiveGenerator(ObjectiveGenerator):
    """
    Generator backed by an LLM provider. Every call falls back to the canned
    generator on any failure (transport, parsing, validation).
    """

    def __init__(
        self,
        provider: LLMProviderInterface,
        fallback: Optional[ObjectiveGenerator] = None,
    ):
        self.provider = provider
        self.fallback = fallback or CannedObjectiveGenerator()

    def _ask(self, prompt: str, system: str) -> str:
        response_data = self.provider.get_response(prompt, system=system)
        text = (response_data.get("text") or "").strip()
        if not text:
            raise ValueError("Provider returned an empty response.")
        return text

    def generate_challenge(self, context: Dict[str, Any]) -> Dict[str, Any]:
        try:
            payload = _extract_json_object(self._ask(self._challenge_prompt(context), DESIGNER_SYSTEM_PROMPT))
            # Validates required fields and goal type; raises ValueError otherwise
            Challenge.from_dict(payload)
            payload.setdefault("id", str(uuid.uuid4()))
            return payload
        except Exception as exc:  # noqa: BLE001 - the game must keep running
            logger.warning("Challenge generation failed (%s); using a canned challenge", exc)
            return self.fallback.generate_challenge(context)

    def generate_trivia(self, theme: str) -> str:
        prompt = f"Give one fact related to the theme '{theme}'. One sentence."
        try:
            return self._ask(prompt, TRIVIA_SYSTEM_PROMPT)
        except Exception as exc:  # noqa: BLE001 - the game must keep running
            logger.warning("Trivia generation failed (%s); using canned trivia", exc)
            return self.fallback.generate_trivia(theme)

    def generate_commentary(self, event: str, score: int) -> str:
        prompt = (
            f"The player just had this event: '{event}'. "
            f"Their score is {score}. React!"
        )
        try:
            return self._ask(prompt, ANNOUNCER_SYSTEM_PROMPT)
        except Exception as exc:  # noqa: BLE001 - the game must keep running
            logger.warning("Commentary generation failed (%s); using canned commentary", exc)
            return self.fallback.generate_commentary(event, score)

    def _challenge_prompt(self, context: Dict[str, Any]) -> str:
        return (
            f"Current game context: {json.dumps(context, sort_keys=True, default=str)}\n\n"
            "Respond with a single JSON object with these keys:\n"
            '  "title": short catchy title\n'
            '  "description": one funny sentence telling the player what to do\n'
            f'  "goalType": one of {sorted(GOAL_TYPES)}\n'
            '  "targetValue": integer target (pellets to eat, points to gain, or seconds to survive)\n'
            f'  "timeLimitSeconds": integer between {MIN_CHALLENGE_TIME_SECONDS} and {MAX_CHALLENGE_TIME_SECONDS}\n'
            '  "reward": {"points": integer, "powerUp": optional, one of '
            f"{list(POWER_UP_KINDS)}" + "}\n"
            '  "failureCondition": "DIE" or "TIME_UP"\n'
            "Output only the JSON object."
        )


def create_objective_generator(rng: Optional[random.Random] = None) -> ObjectiveGenerator:
    """
    Factory: an LLM-backed generator when OPENROUTER_API_KEY is configured,
    the canned generator otherwise.
    """
    canned = CannedObjectiveGenerator(rng=rng)
    if not os.getenv("OPENROUTER_API_KEY"):
        logger.info("OPENROUTER_API_KEY not set; using canned challenges and trivia")
        return canned

    try:
        provider = create_llm_provider()
    except ValueError as exc:
        logger.warning("Could not create LLM provider (%s); using canned generator", exc)
        return canned
    return LLMObjectiveGenerator(provider, fallback=canned)

"""
Registry for autopilot player variants.

Maps variant keys (e.g., 'random', 'greedy') to player classes.
To add a new variant, create a module with the class, import it here, and add
an entry to PLAYER_VARIANTS.
"""

from typing import Dict, List, Optional, Type

from .base import Player
from .greedy_player import GreedyPlayer
from .random_player import RandomPlayer

PLAYER_VARIANTS: Dict[str, Type[Player]] = {
    "greedy": GreedyPlayer,
    "random": RandomPlayer,
}

DEFAULT_VARIANT = "greedy"

# Canonical list of available variant keys (for CLI exposure)
AVAILABLE_VARIANTS = list(PLAYER_VARIANTS.keys())


def get_player_class(variant_key: Optional[str] = None) -> Type[Player]:
    """
    Get the player class for a given variant key.

    Args:
        variant_key: One of 'greedy', 'random'. If None or empty, returns the default.

    Returns:
        The player class (subclass of Player).

    Raises:
        ValueError: If variant_key is not recognized.
    """
    if not variant_key or variant_key.strip() == "":
        variant_key = DEFAULT_VARIANT

    variant_key = variant_key.strip().lower()

    if variant_key not in PLAYER_VARIANTS:
        available = ", ".join(AVAILABLE_VARIANTS)
        raise ValueError(
            f"Unknown player variant '{variant_key}'. Available variants: {available}"
        )

    return PLAYER_VARIANTS[variant_key]


def list_variants() -> List[dict]:
    """
    Return metadata about all available player variants.
    """
    return [
        {"key": "greedy", "description": "Walks toward the food, avoiding walls, itself and the boss"},
        {"key": "random", "description": "Random safe moves"},
    ]

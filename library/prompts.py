"""Ready-made prompts offered when the studio is empty."""

from __future__ import annotations

import random
from typing import List, Optional

ALL_PROMPTS = [
    "An astronaut surfing a cosmic wave in synthwave style",
    "An ancient, dusty library inside a giant hollow tree",
    "A majestic lion with a galaxy-patterned mane, sitting on a crystal throne",
    "A cozy cyberpunk ramen shop on a rainy night, neon lights reflecting on the wet pavement",
    "An enchanted forest where the trees carry glowing runes and the river flows with liquid starlight",
    "A Victorian robot serving tea in a lush garden full of exotic flowers",
    "A bioluminescent underwater city inhabited by humanoid sea creatures",
    "A floating market on an alien planet with two moons in the sky",
    "A dragon made entirely of flowers and vines, sleeping in a sunny field",
    "Portrait of a noble Renaissance cat wearing a ruff and a monocle",
    "A surreal desert landscape with melting clocks, in homage to Salvador Dali",
    "A floating island with a waterfall pouring into the clouds below",
    "A ghost knight in shining armor riding through a haunted forest",
    "A steam train flying through a twilight sky full of zeppelins",
    "A detailed street scene in feudal Japan with samurai and geishas",
    "A crystal lighthouse on a rocky coast during a magical storm",
    "A giant octopus wearing a bowler hat and reading a book underwater",
    "An extreme close-up of a snowflake revealing intricate geometric patterns",
    "A sleek sports car racing along a rainbow highway in space",
    "A grizzly bear catching salmon under the northern lights",
]


def sample_prompts(count: int = 4, rng: Optional[random.Random] = None) -> List[str]:
    """Return ``count`` distinct prompts in random order."""
    count = max(0, min(count, len(ALL_PROMPTS)))
    return (rng or random).sample(ALL_PROMPTS, count)

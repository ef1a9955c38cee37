"""
Settlement name generation.

Names are built from an optional prefix, a capitalized root and an optional
suffix, all drawn from the generator passed in so names are reproducible.
"""

from typing import List, Optional

from .prng import Mulberry32PRNG

NAME_PREFIXES: List[str] = [
    "New", "Old", "East", "West", "North", "South", "Great", "Little", "Upper", "Lower",
]
NAME_ROOTS: List[str] = [
    "haven", "port", "ford", "bridge", "burg", "ton", "ville", "dale", "wood", "field",
    "castle", "keep", "hold", "watch", "guard", "stone", "rock", "cliff", "hill", "mount",
    "river", "lake", "bay", "cove", "shore", "marsh", "glen", "vale", "moor", "heath",
]
NAME_SUFFIXES: List[str] = ["ia", "heim", "grad", "opolis", "minster", "wick", "worth", "stead", ""]


class NameGenerator:
    """Generates settlement names from prefix/root/suffix word lists."""

    def __init__(
        self,
        prng: Mulberry32PRNG,
        prefix_chance: float = 0.2,
        suffix_chance: float = 0.5,
        prefixes: Optional[List[str]] = None,
        roots: Optional[List[str]] = None,
        suffixes: Optional[List[str]] = None,
    ):
        """Initialize name generator with the PRNG used for every draw."""
        self.prng = prng
        self.prefix_chance = prefix_chance
        self.suffix_chance = suffix_chance
        self.prefixes = prefixes or NAME_PREFIXES
        self.roots = roots or NAME_ROOTS
        self.suffixes = suffixes if suffixes is not None else NAME_SUFFIXES

    def generate_city_name(self) -> str:
        """Generate a settlement name such as ``North Havenheim`` or ``Ford``."""
        use_prefix = self.prng.chance(self.prefix_chance)
        use_suffix = self.prng.chance(self.suffix_chance)

        name = ""
        if use_prefix:
            name += self.prng.choice(self.prefixes) + " "

        root = self.prng.choice(self.roots)
        name += root[:1].upper() + root[1:]

        if use_suffix:
            name += self.prng.choice(self.suffixes)

        return name

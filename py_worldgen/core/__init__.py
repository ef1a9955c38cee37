"""
Core world generation functionality.
"""

from .biomes import Biome, BIOME_NAMES
from .pipeline import ProgressCallback, WorldDebug, WorldSnapshot, generate_world
from .prng import Mulberry32PRNG
from .roads import Road
from .runner import ErrorMessage, GenerationMessage, ProgressMessage, ResultMessage, run_generation
from .settlements import City, CityType
from .statistics import BiomeStatistics, WorldStatistics, summarize_world

__all__ = ['Biome', 'BIOME_NAMES', 'ProgressCallback', 'WorldDebug', 'WorldSnapshot',
           'generate_world', 'Mulberry32PRNG', 'Road', 'City', 'CityType',
           'GenerationMessage', 'ProgressMessage', 'ResultMessage', 'ErrorMessage',
           'run_generation', 'BiomeStatistics', 'WorldStatistics', 'summarize_world']

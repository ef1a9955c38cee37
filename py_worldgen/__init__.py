"""
Procedural fantasy world generation.
"""

from .config import WorldSettings, apply_preset
from .core import WorldSnapshot, generate_world, run_generation, summarize_world

__all__ = ['WorldSettings', 'apply_preset', 'WorldSnapshot', 'generate_world',
           'run_generation', 'summarize_world']

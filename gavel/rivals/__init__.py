from .profiles import (RivalProfile, MoodModifiers, MOOD_TABLE, TAG_POOL, mood_modifiers,
                       calculate_interest, make_rival_profiles)
from .agent import RivalAIConfig, RivalAgent, RivalArena

__all__ = [
    'RivalProfile', 'MoodModifiers', 'MOOD_TABLE', 'TAG_POOL', 'mood_modifiers',
    'calculate_interest', 'make_rival_profiles',
    'RivalAIConfig', 'RivalAgent', 'RivalArena',
]

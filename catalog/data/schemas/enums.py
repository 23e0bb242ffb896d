from enum import Enum


class Difficulty(str, Enum):
    """Problem difficulty levels in the catalog."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

"""Enumerations shared by the ORM models, API schemas and services."""
from enum import Enum


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class VoteType(str, Enum):
    """A vote as it is stored."""

    LIKE = "like"
    DISLIKE = "dislike"


class VoteAction(str, Enum):
    """A vote as it is requested. UNVOTE removes the caller's existing vote."""

    LIKE = "like"
    DISLIKE = "dislike"
    UNVOTE = "unvote"


class IngredientCategory(str, Enum):
    MEAT = "Meat"
    VEGETABLES = "Vegetables"
    FRUIT = "Fruit"
    GRAINS = "Grains"
    DAIRY = "Dairy"
    SPICES = "Spices"
    HERBS = "Herbs"
    OIL = "Oil"
    CONDIMENT = "Condiment"
    OTHER = "Other"
    PROTEIN = "Protein"
    SEAFOOD = "Seafood"
    LEGUMES = "Legumes"
    BAKERY = "Bakery"
    BAKING = "Baking"
    NUTS = "Nuts"
    SEEDS = "Seeds"
    SWEETENERS = "Sweeteners"
    BEVERAGES = "Beverages"
    SPREADS = "Spreads"

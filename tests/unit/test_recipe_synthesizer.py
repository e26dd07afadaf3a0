"""Recipe synthesizer tests (model path, backup model, fallback, normalization)"""

import json
import random
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from app.core.enums import Difficulty
from app.services.recipe_synthesizer import (
    RecipeSynthesizer,
    build_recipe_prompt,
    extract_quantity,
    normalize_recipe,
)

NAMES = ["chicken", "rice", "basil"]

MODEL_RECIPE = {
    "title": "Basil Chicken Rice Bowl",
    "description": "Fragrant chicken over rice",
    "ingredients": [
        {"name": "chicken thighs", "quantity": "2 pieces"},
        {"name": "jasmine rice", "quantity": "1.5 cups"},
        {"name": "basil", "quantity": "a handful"},
    ],
    "cookingMethod": ["Cook the rice", "Sear the chicken", "Toss with basil"],
    "preparationTime": "25 minutes",
    "difficulty": "easy",
}


def _failing_model(exc: Exception) -> MagicMock:
    model = MagicMock()
    model.ainvoke = AsyncMock(side_effect=exc)
    return model


async def test_model_recipe_is_normalized():
    llm = FakeListChatModel(responses=[f"Here you go:\n{json.dumps(MODEL_RECIPE)}"])
    synthesizer = RecipeSynthesizer(llm=llm, rng=random.Random(1))

    recipe = await synthesizer.synthesize(NAMES)

    assert recipe.source == "model"
    assert recipe.title == "Basil Chicken Rice Bowl"
    assert recipe.cooking_method == "Cook the rice\nSear the chicken\nToss with basil"
    assert recipe.preparation_time == 25
    assert recipe.difficulty == Difficulty.EASY
    assert [item.quantity for item in recipe.ingredients] == ["2 pieces", "1.5 cups", "a handful"]


async def test_backup_model_used_when_primary_output_is_unusable():
    primary = FakeListChatModel(responses=["Sorry, I can't do that right now."])
    backup = FakeListChatModel(responses=[json.dumps(MODEL_RECIPE)])
    synthesizer = RecipeSynthesizer(llm=primary, backup_llm=backup, rng=random.Random(1))

    recipe = await synthesizer.synthesize(NAMES)

    assert recipe.source == "backup"
    assert recipe.title == "Basil Chicken Rice Bowl"


async def test_backup_model_used_when_primary_raises():
    backup = FakeListChatModel(responses=[json.dumps(MODEL_RECIPE)])
    synthesizer = RecipeSynthesizer(
        llm=_failing_model(TimeoutError("model timed out")),
        backup_llm=backup,
        rng=random.Random(1),
    )

    recipe = await synthesizer.synthesize(NAMES)

    assert recipe.source == "backup"


async def test_backup_model_used_without_primary():
    backup = FakeListChatModel(responses=[json.dumps(MODEL_RECIPE)])
    synthesizer = RecipeSynthesizer(llm=None, backup_llm=backup, rng=random.Random(1))

    recipe = await synthesizer.synthesize(NAMES)

    assert synthesizer.llm is None
    assert recipe.source == "backup"
    assert recipe.title == "Basil Chicken Rice Bowl"


@pytest.mark.parametrize(
    "exc",
    [ConnectionError("unreachable"), TimeoutError("slow"), RuntimeError("boom"), ValueError("bad")],
)
async def test_unreachable_models_fall_back(exc):
    synthesizer = RecipeSynthesizer(
        llm=_failing_model(exc),
        backup_llm=_failing_model(exc),
        rng=random.Random(1),
    )

    recipe = await synthesizer.synthesize(NAMES)

    assert recipe.source == "fallback"
    assert recipe.title == "chicken with rice Delight"
    assert "enjoy your meal" in recipe.cooking_method


async def test_missing_api_key_uses_fallback(synthesizer):
    recipe = await synthesizer.synthesize(["tofu", "spinach"])

    assert synthesizer.llm is None
    assert recipe.source == "fallback"
    assert recipe.title == "tofu with spinach Delight"


async def test_empty_ingredient_list_uses_fallback():
    llm = MagicMock()
    llm.ainvoke = AsyncMock()
    synthesizer = RecipeSynthesizer(llm=llm, rng=random.Random(1))

    recipe = await synthesizer.synthesize(["", "  "])

    assert recipe.source == "fallback"
    assert recipe.title == "Mixed Delight"
    llm.ainvoke.assert_not_called()


async def test_recovered_steps_keep_default_fields():
    llm = FakeListChatModel(responses=["1. Boil water\n2. Add pasta\n3. Drain"])
    synthesizer = RecipeSynthesizer(llm=llm, rng=random.Random(1))

    recipe = await synthesizer.synthesize(["pasta", "garlic"])

    assert recipe.source == "model"
    assert recipe.title == "pasta Dish"
    assert recipe.description == "A dish featuring pasta, garlic"
    assert recipe.cooking_method == "Boil water\nAdd pasta\nDrain"
    assert recipe.preparation_time == 30
    assert recipe.difficulty == Difficulty.MEDIUM
    assert [(i.name, i.quantity) for i in recipe.ingredients] == [("pasta", "to taste"), ("garlic", "to taste")]


def test_prompt_lists_ingredients_with_units():
    prompt = build_recipe_prompt(["flour", "milk"], {"milk": "ml"})

    assert "flour, milk (measured in ml)" in prompt
    assert '"cookingMethod"' in prompt


@pytest.mark.parametrize(
    "value, expected",
    [(None, 30), ("", 30), ("abc", 30), (0, 30), (-5, 30), ("45 minutes", 45), (12.7, 12), (True, 30)],
)
def test_preparation_time_coercion(value, expected):
    recipe = normalize_recipe({"preparationTime": value}, ["egg"])

    assert recipe.preparation_time == expected


@pytest.mark.parametrize(
    "value, expected",
    [("HARD", Difficulty.HARD), ("Easy", Difficulty.EASY), ("extreme", Difficulty.MEDIUM), (None, Difficulty.MEDIUM)],
)
def test_difficulty_coercion(value, expected):
    assert normalize_recipe({"difficulty": value}, ["egg"]).difficulty == expected


def test_string_cooking_method_is_kept():
    recipe = normalize_recipe({"cookingMethod": "Whisk eggs\nFry"}, ["egg"])

    assert recipe.cooking_method == "Whisk eggs\nFry"
    assert recipe.steps == ["Whisk eggs", "Fry"]


def test_missing_cooking_method():
    assert normalize_recipe({}, ["egg"]).cooking_method == "No instructions provided"


@pytest.mark.parametrize(
    "text, default_unit, expected",
    [
        ("2 cups", None, (2.0, "cups")),
        ("1.5 Tablespoons of oil", None, (1.5, "tablespoons")),
        ("to taste", None, (1.0, "unit")),
        ("to taste", "grams", (1.0, "grams")),
        ("3", "pieces", (3.0, "pieces")),
        (None, None, (1.0, "unit")),
    ],
)
def test_extract_quantity(text, default_unit, expected):
    assert extract_quantity(text, default_unit) == expected

"""Recipe generation from a list of ingredients.

`RecipeSynthesizer.synthesize` asks a chat model for a JSON recipe, tries a
backup model when that fails, and finally falls back to
`generate_fallback_recipe`, a rule-based generator that cannot fail. Callers
always get a `GeneratedRecipe` back.
"""
import logging
import random
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, assert_never

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from app.core.config import get_settings
from app.core.enums import Difficulty
from app.services.recipe_parsing import (
    ParsedRecoveredObject,
    ParsedRecoveredSteps,
    ParsedStrict,
    ParseFailed,
    ParseResult,
    parse_model_output,
)

logger = logging.getLogger(__name__)

DEFAULT_PREPARATION_TIME = 30
DEFAULT_QUANTITY_TEXT = "to taste"
DEFAULT_UNIT = "unit"

SYSTEM_PROMPT = "You are a creative home cook. You answer with a single JSON object and nothing else."

PROTEIN_KEYWORDS = ("chicken", "beef", "pork", "fish", "shrimp", "tofu")
VEGETABLE_KEYWORDS = ("carrot", "onion", "pepper", "tomato", "spinach", "lettuce")
GRAIN_KEYWORDS = ("pasta", "rice", "noodle", "bread")
HERB_KEYWORDS = ("mint", "basil", "thyme", "oregano", "parsley")

_LEADING_NUMBER = re.compile(r"(\d+\.?\d*)")
_NUMBER_AND_UNIT = re.compile(r"(\d+\.?\d*)\s+([a-zA-Z]+)")
_LEADING_MINUTES = re.compile(r"\s*(\d+)")


@dataclass
class GeneratedIngredient:
    name: str
    quantity: str


@dataclass
class GeneratedRecipe:
    title: str
    description: str
    ingredients: list[GeneratedIngredient]
    cooking_method: str
    preparation_time: int
    difficulty: Difficulty
    source: str = field(default="model", compare=False)

    @property
    def steps(self) -> list[str]:
        return [line for line in self.cooking_method.split("\n") if line.strip()]


def build_recipe_prompt(
    ingredient_names: Sequence[str],
    units: Optional[Mapping[str, str]] = None,
) -> str:
    units = units or {}
    listed = []
    for name in ingredient_names:
        unit = units.get(name)
        listed.append(f"{name} (measured in {unit})" if unit else name)

    return f"""Create a detailed recipe using only these ingredients: {", ".join(listed)}.

The recipe should include:
1. A creative title
2. A short description of the dish
3. Ingredient quantities (use common measurements like cups, tablespoons, grams)
4. Step-by-step cooking instructions
5. Estimated preparation time in minutes
6. Difficulty level (Easy, Medium, or Hard)

Respond with strict JSON only, using exactly this structure:
{{
  "title": "Recipe Title",
  "description": "Short description",
  "ingredients": [
    {{"name": "ingredient name", "quantity": "amount"}}
  ],
  "cookingMethod": ["First step", "Second step"],
  "preparationTime": 30,
  "difficulty": "Medium"
}}"""


def _contains_any(names: Sequence[str], keywords: Sequence[str]) -> bool:
    return any(keyword in name.lower() for name in names for keyword in keywords)


def generate_cooking_method(ingredient_names: Sequence[str]) -> str:
    steps = [
        "Start by preparing all your ingredients. Measure and prepare all your ingredients before you turn on the heat."
    ]

    if _contains_any(ingredient_names, PROTEIN_KEYWORDS):
        steps.append("Season your protein and cook until properly done.")

    if _contains_any(ingredient_names, VEGETABLE_KEYWORDS):
        steps.append("Wash and chop the vegetables into bite-sized pieces.")
        steps.append("Sauté the vegetables until tender but still crisp.")

    if _contains_any(ingredient_names, GRAIN_KEYWORDS):
        steps.append("Cook the grains according to package instructions.")

    if _contains_any(ingredient_names, HERB_KEYWORDS):
        steps.append("Finely chop the herbs to release their aromatics.")

    steps.append("Combine all the ingredients in a large bowl.")
    steps.append("Mix everything together gently to preserve textures.")
    steps.append("Serve immediately and enjoy your meal!")

    return "\n".join(steps)


def _fallback_quantity(name: str, rng: random.Random) -> str:
    lowered = name.lower()
    if "salt" in lowered or "pepper" in lowered:
        return DEFAULT_QUANTITY_TEXT

    if "pasta" in lowered or "rice" in lowered:
        unit = "cups"
    elif "carrot" in lowered or "apple" in lowered:
        unit = "pieces"
    elif "mint" in lowered or "herb" in lowered:
        unit = "tablespoons"
    else:
        unit = "portions"
    return f"{rng.randint(1, 3)} {unit}"


def generate_fallback_recipe(
    ingredient_names: Sequence[str],
    rng: Optional[random.Random] = None,
) -> GeneratedRecipe:
    """Rule-based recipe used whenever the model path gives nothing usable."""
    rng = rng or random.Random()
    names = list(ingredient_names)
    first = names[0] if names else "Mixed"
    title = f"{first} with {names[1]} Delight" if len(names) > 1 else f"{first} Delight"

    return GeneratedRecipe(
        title=title,
        description=f"A creative dish featuring {', '.join(names)}",
        ingredients=[GeneratedIngredient(name=name, quantity=_fallback_quantity(name, rng)) for name in names],
        cooking_method=generate_cooking_method(names),
        preparation_time=rng.randrange(20, 40),
        difficulty=rng.choice(list(Difficulty)),
        source="fallback",
    )


def extract_quantity(quantity_text: Optional[str], default_unit: Optional[str] = None) -> tuple[float, str]:
    """Numeric quantity and unit from text such as "2 cups" or "1.5 tablespoons".

    Text without a number (e.g. "to taste") yields quantity 1 and the default unit.
    """
    quantity = 1.0
    unit = default_unit or DEFAULT_UNIT
    if not quantity_text:
        return quantity, unit

    number = _LEADING_NUMBER.search(quantity_text)
    if number:
        quantity = float(number.group(1))

    with_unit = _NUMBER_AND_UNIT.search(quantity_text)
    if with_unit:
        unit = with_unit.group(2).lower()

    return quantity, unit


def _step_text(step: Any) -> str:
    if isinstance(step, dict):
        return " ".join(str(v).strip() for v in step.values() if isinstance(v, (str, int, float)) and str(v).strip())
    return str(step).strip()


def _coerce_cooking_method(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list):
        steps = [_step_text(step) for step in value]
        return "\n".join(step for step in steps if step) or None
    return None


def _coerce_minutes(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_PREPARATION_TIME
    if isinstance(value, (int, float)):
        minutes = int(value)
    elif isinstance(value, str):
        match = _LEADING_MINUTES.match(value)
        minutes = int(match.group(1)) if match else 0
    else:
        minutes = 0
    return minutes if minutes > 0 else DEFAULT_PREPARATION_TIME


def _coerce_difficulty(value: Any) -> Difficulty:
    if isinstance(value, str):
        for difficulty in Difficulty:
            if difficulty.value.lower() == value.strip().lower():
                return difficulty
    return Difficulty.MEDIUM


def _coerce_ingredients(value: Any, ingredient_names: Sequence[str]) -> list[GeneratedIngredient]:
    ingredients = []
    if isinstance(value, list):
        for item in value:
            if not isinstance(item, dict) or not str(item.get("name") or "").strip():
                continue
            quantity = item.get("quantity")
            ingredients.append(
                GeneratedIngredient(
                    name=str(item["name"]).strip(),
                    quantity=str(quantity).strip() if quantity not in (None, "") else DEFAULT_QUANTITY_TEXT,
                )
            )
    if ingredients:
        return ingredients
    return [GeneratedIngredient(name=name, quantity=DEFAULT_QUANTITY_TEXT) for name in ingredient_names]


def normalize_recipe(data: Mapping[str, Any], ingredient_names: Sequence[str], source: str = "model") -> GeneratedRecipe:
    """Fill defaults and coerce types on a parsed model response."""
    first = ingredient_names[0] if ingredient_names else "Mixed"
    title = data.get("title")
    description = data.get("description")

    return GeneratedRecipe(
        title=title.strip() if isinstance(title, str) and title.strip() else f"{first} Dish",
        description=(
            description.strip()
            if isinstance(description, str) and description.strip()
            else f"A dish featuring {', '.join(ingredient_names)}"
        ),
        ingredients=_coerce_ingredients(data.get("ingredients"), ingredient_names),
        cooking_method=_coerce_cooking_method(data.get("cookingMethod")) or "No instructions provided",
        preparation_time=_coerce_minutes(data.get("preparationTime")),
        difficulty=_coerce_difficulty(data.get("difficulty")),
        source=source,
    )


def recipe_from_parse_result(
    parsed: ParseResult,
    ingredient_names: Sequence[str],
    source: str = "model",
) -> Optional[GeneratedRecipe]:
    """GeneratedRecipe for a usable parse, None when the fallback is needed."""
    match parsed:
        case ParsedStrict(data=data) | ParsedRecoveredObject(data=data):
            return normalize_recipe(data, ingredient_names, source=source)
        case ParsedRecoveredSteps(steps=steps):
            return normalize_recipe({"cookingMethod": steps}, ingredient_names, source=source)
        case ParseFailed(reason=reason):
            logger.warning("Could not parse %s output: %s", source, reason)
            return None
        case _:
            assert_never(parsed)


def _message_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return str(content or "")


class RecipeSynthesizer:
    """Model-backed recipe generation with a deterministic fallback."""

    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        backup_llm: Optional[BaseChatModel] = None,
        rng: Optional[random.Random] = None,
    ):
        settings = get_settings()
        if llm is None and settings.openai_api_key:
            llm = self._chat_model(settings.recipe_model)
        if backup_llm is None and settings.openai_api_key and settings.recipe_backup_model:
            backup_llm = self._chat_model(settings.recipe_backup_model)
        self.llm = llm
        self.backup_llm = backup_llm
        self.rng = rng or random.Random()

    @staticmethod
    def _chat_model(model: str) -> ChatOpenAI:
        settings = get_settings()
        return ChatOpenAI(
            api_key=settings.openai_api_key,
            model=model,
            temperature=settings.recipe_temperature,
            timeout=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
        )

    async def _complete(self, llm: BaseChatModel, prompt: str) -> str:
        response = await llm.ainvoke([SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)])
        return _message_text(response.content)

    async def synthesize(
        self,
        ingredient_names: Sequence[str],
        units: Optional[Mapping[str, str]] = None,
    ) -> GeneratedRecipe:
        """Generate a recipe for the given ingredient names. Never raises."""
        names = [name.strip() for name in ingredient_names if name and name.strip()]
        if not names:
            logger.warning("No ingredient names given, using fallback recipe")
            return generate_fallback_recipe(names, self.rng)

        models = [
            (source, llm)
            for source, llm in (("model", self.llm), ("backup", self.backup_llm))
            if llm is not None
        ]
        if not models:
            logger.warning("OPENAI_API_KEY is not configured, using fallback recipe")
            return generate_fallback_recipe(names, self.rng)

        logger.info("Generating recipe with ingredients: %s", names)
        prompt = build_recipe_prompt(names, units)

        for source, llm in models:
            try:
                raw = await self._complete(llm, prompt)
                recipe = recipe_from_parse_result(parse_model_output(raw), names, source=source)
            except Exception as exc:
                logger.warning("Recipe generation with %s failed: %s", source, exc)
                continue
            if recipe is not None:
                return recipe

        logger.info("Falling back to rule-based recipe for %s", names)
        return generate_fallback_recipe(names, self.rng)


_recipe_synthesizer: Optional[RecipeSynthesizer] = None


def get_recipe_synthesizer() -> RecipeSynthesizer:
    """Return the process-wide RecipeSynthesizer."""
    global _recipe_synthesizer
    if _recipe_synthesizer is None:
        _recipe_synthesizer = RecipeSynthesizer()
    return _recipe_synthesizer

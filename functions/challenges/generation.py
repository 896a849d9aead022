# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================


"""Picks a category and difficulty and generates challenge data from templates."""

import logging
import random
from typing import Optional

from challenges import templates
from shared.api import ChallengeGenerationOptions
from shared.constants import CHALLENGE_CATEGORIES, TEST_CATEGORY
from shared.errors import ValidationError
from shared.validators import validate_challenge_schema

logger = logging.getLogger(__name__)

CATEGORY_DESCRIPTIONS = {
    "adventure": {
        "description": "Outdoor activities, exploration, trying new places",
        "examples": ["hiking", "exploring", "traveling", "outdoor activities"],
    },
    "social": {
        "description": "Meeting people, conversations, group activities",
        "examples": ["talking to strangers", "making friends", "group events"],
    },
    "creative": {
        "description": "Art, music, writing, creative expression",
        "examples": ["drawing", "writing", "music", "crafts"],
    },
    "fitness": {
        "description": "Exercise, sports, physical activities",
        "examples": ["running", "gym", "sports", "yoga"],
    },
    "academic": {
        "description": "Learning, studying, intellectual growth",
        "examples": ["learning new skills", "reading", "courses", "research"],
    },
    "wellness": {
        "description": "Mental health, meditation, self-care",
        "examples": ["meditation", "self-care", "mindfulness", "relaxation"],
    },
    "exploration": {
        "description": "Discovering new places, trying new things",
        "examples": ["new restaurants", "new neighborhoods", "new experiences"],
    },
}

DIFFICULTY_LEVELS = {
    "easy": {
        "description": "Quick, simple activities that take 15-30 minutes",
        "points": 10,
        "duration": 30,
    },
    "medium": {
        "description": "Moderate activities that take 30-60 minutes or require some effort",
        "points": 20,
        "duration": 60,
    },
    "hard": {
        "description": "Challenging activities that take 1+ hours or significant effort",
        "points": 30,
        "duration": 120,
    },
}

GENERATABLE_CATEGORIES = CHALLENGE_CATEGORIES + [TEST_CATEGORY]


def get_generation_info() -> dict:
    return {"categories": CATEGORY_DESCRIPTIONS, "difficulties": DIFFICULTY_LEVELS}


def generate_challenge(
    options: Optional[ChallengeGenerationOptions] = None,
    api_key: Optional[str] = None,
    rng=random,
) -> dict:
    """
    Generates camelCase challenge data ready to be stored.

    A random category and difficulty are used when the options leave them
    unset. If the generated data fails validation, the selected category and
    difficulty are forced back onto it.
    """
    options = options or ChallengeGenerationOptions()
    category = options.category or rng.choice(list(CATEGORY_DESCRIPTIONS))
    difficulty = options.difficulty or rng.choice(list(DIFFICULTY_LEVELS))

    challenge_data = templates.generate_from_template(
        category,
        difficulty,
        user_context=options.user_context,
        location=options.location,
        custom_description=options.custom_description,
        people_count=options.people_count,
        api_key=api_key,
        rng=rng,
    )
    challenge_data["isActive"] = True
    challenge_data["isFeatured"] = False

    try:
        challenge_data = validate_challenge_schema(
            challenge_data, allowed_categories=GENERATABLE_CATEGORIES
        )
    except ValidationError as e:
        logger.warning("Generated challenge failed validation, using defaults: %s", e)
        challenge_data["category"] = category
        challenge_data["difficulty"] = difficulty
    return challenge_data

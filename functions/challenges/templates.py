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


"""
Challenge templates: a static table of prompts with placeholder variables.

A template is picked at random for a category, its placeholders are filled
with random options, and the result is optionally rewritten by Gemini before
being scored with the difficulty multiplier table.
"""

import logging
import random
import re
from typing import Optional

from models import gemini
from models import prompts
from shared.constants import MAX_TITLE_LENGTH
from shared.json_utils import extract_json_object
from shared.types import Difficulty, Frequency

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_CATEGORY = "adventure"
DEFAULT_LOCATION = {"type": "anywhere"}

CHALLENGE_TEMPLATES = {
    "adventure": [
        {
            "template": "Explore {location_type} you've never visited before and {action}",
            "variables": {
                "location_type": [
                    "a new neighborhood",
                    "a hidden park",
                    "a local landmark",
                    "a campus building",
                ],
                "action": [
                    "take 5 photos",
                    "find 3 interesting things",
                    "talk to someone there",
                    "discover a secret spot",
                ],
            },
            "base_points": 15,
            "base_duration": 45,
        },
        {
            "template": "Go on a {transportation} adventure to {destination_type} and {challenge_action}",
            "variables": {
                "transportation": ["walking", "biking", "public transit"],
                "destination_type": [
                    "a new area",
                    "a different part of campus",
                    "a nearby town",
                ],
                "challenge_action": [
                    "document your journey",
                    "try something new there",
                    "meet someone new",
                ],
            },
            "base_points": 20,
            "base_duration": 60,
        },
    ],
    "social": [
        {
            "template": "Start a conversation with {person_type} and learn {learning_goal}",
            "variables": {
                "person_type": [
                    "a stranger",
                    "someone new in class",
                    "a campus staff member",
                    "a fellow student",
                ],
                "learning_goal": [
                    "something interesting about them",
                    "their favorite hobby",
                    "a fun fact",
                    "their story",
                ],
            },
            "base_points": 15,
            "base_duration": 15,
        },
        {
            "template": "Organize or join a {activity_type} with {group_size} people and {group_action}",
            "variables": {
                "activity_type": ["study group", "coffee meetup", "game session", "walk"],
                "group_size": ["at least 2", "3-5", "a small group"],
                "group_action": [
                    "have fun together",
                    "complete a task",
                    "share experiences",
                ],
            },
            "base_points": 25,
            "base_duration": 60,
        },
    ],
    "creative": [
        {
            "template": "Create {art_type} using {materials} and {creative_action}",
            "variables": {
                "art_type": ["art", "music", "writing", "photography"],
                "materials": [
                    "found materials",
                    "digital tools",
                    "your phone",
                    "basic supplies",
                ],
                "creative_action": [
                    "share it online",
                    "show a friend",
                    "document the process",
                ],
            },
            "base_points": 20,
            "base_duration": 60,
        },
        {
            "template": "Learn {skill_type} by {learning_method} and {demonstration}",
            "variables": {
                "skill_type": ["a new art technique", "a song", "a recipe", "a craft"],
                "learning_method": [
                    "watching tutorials",
                    "following a guide",
                    "trial and error",
                ],
                "demonstration": [
                    "create something",
                    "perform it",
                    "show your progress",
                ],
            },
            "base_points": 25,
            "base_duration": 90,
        },
    ],
    "fitness": [
        {
            "template": "Complete a {workout_type} workout for {duration} minutes {location_context}",
            "variables": {
                "workout_type": ["cardio", "strength", "yoga", "HIIT"],
                "duration": ["20", "30", "45"],
                "location_context": [
                    "outdoors",
                    "at the gym",
                    "in your room",
                    "at a park",
                ],
            },
            "base_points": 15,
            "base_duration": 30,
        },
        {
            "template": "Try a new {activity_type} activity like {examples} and {challenge_goal}",
            "variables": {
                "activity_type": ["sports", "fitness", "outdoor"],
                "examples": ["rock climbing", "dancing", "swimming", "hiking"],
                "challenge_goal": [
                    "complete a session",
                    "learn the basics",
                    "try for 30 minutes",
                ],
            },
            "base_points": 20,
            "base_duration": 60,
        },
    ],
    "academic": [
        {
            "template": "Learn about {topic_type} by {learning_method} and {application}",
            "variables": {
                "topic_type": [
                    "a new subject",
                    "a different culture",
                    "a scientific concept",
                    "a historical event",
                ],
                "learning_method": [
                    "reading articles",
                    "watching documentaries",
                    "taking notes",
                    "researching",
                ],
                "application": [
                    "explain it to someone",
                    "write about it",
                    "create a summary",
                ],
            },
            "base_points": 20,
            "base_duration": 60,
        },
        {
            "template": "Master {skill_type} by {practice_method} and {demonstration}",
            "variables": {
                "skill_type": [
                    "a new language",
                    "a programming concept",
                    "a study technique",
                    "a research method",
                ],
                "practice_method": [
                    "practicing for 1 hour",
                    "completing exercises",
                    "building a project",
                ],
                "demonstration": [
                    "show your progress",
                    "create something",
                    "teach someone",
                ],
            },
            "base_points": 25,
            "base_duration": 90,
        },
    ],
    "wellness": [
        {
            "template": "Practice {wellness_activity} for {duration} minutes and {reflection}",
            "variables": {
                "wellness_activity": [
                    "meditation",
                    "mindfulness",
                    "breathing exercises",
                    "stretching",
                ],
                "duration": ["10", "15", "20"],
                "reflection": [
                    "reflect on your day",
                    "set intentions",
                    "practice gratitude",
                ],
            },
            "base_points": 10,
            "base_duration": 15,
        },
        {
            "template": "Take a {break_type} break to {wellness_action} and {benefit}",
            "variables": {
                "break_type": ["digital", "study", "work"],
                "wellness_action": [
                    "go for a walk",
                    "do something creative",
                    "connect with nature",
                ],
                "benefit": ["recharge", "reduce stress", "improve focus"],
            },
            "base_points": 15,
            "base_duration": 30,
        },
    ],
    "test": [
        {
            "template": "drink water",
            "variables": {},
            "base_points": 10,
            "base_duration": 5,
            # Always produces the same challenge, with no AI rewrite.
            "fixed": True,
        },
    ],
    "exploration": [
        {
            "template": "Try {new_experience} at {location_type} and {documentation}",
            "variables": {
                "new_experience": [
                    "a new restaurant",
                    "a new activity",
                    "a new place",
                    "a new event",
                ],
                "location_type": ["on campus", "in your city", "nearby", "locally"],
                "documentation": [
                    "take photos",
                    "write about it",
                    "share your experience",
                ],
            },
            "base_points": 15,
            "base_duration": 60,
        },
        {
            "template": "Discover {discovery_type} in {location_context} and {action}",
            "variables": {
                "discovery_type": [
                    "hidden gems",
                    "new spots",
                    "local secrets",
                    "interesting places",
                ],
                "location_context": ["your area", "campus", "nearby", "your city"],
                "action": ["explore them", "document them", "share with friends"],
            },
            "base_points": 20,
            "base_duration": 45,
        },
    ],
}

DIFFICULTY_MULTIPLIERS = {
    Difficulty.EASY: {"points": 1.0, "duration": 0.8},
    Difficulty.MEDIUM: {"points": 1.5, "duration": 1.0},
    Difficulty.HARD: {"points": 2.0, "duration": 1.5},
}


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; 22.5 points must become 23.
    return int(value + 0.5)


def select_template(category: Optional[str], rng=random) -> dict:
    templates = CHALLENGE_TEMPLATES.get(
        category, CHALLENGE_TEMPLATES[DEFAULT_TEMPLATE_CATEGORY]
    )
    return rng.choice(templates)


def fill_template_variables(template: dict, rng=random) -> tuple[str, dict]:
    """Replaces each {placeholder} with a random option for it."""
    filled_text = template["template"]
    chosen = {}
    for name, options in template["variables"].items():
        selected = rng.choice(options)
        chosen[name] = selected
        filled_text = filled_text.replace("{" + name + "}", selected, 1)
    return filled_text, chosen


def _fallback_enhancement(base_text: str) -> dict:
    return {
        "title": base_text[:MAX_TITLE_LENGTH],
        "description": base_text,
        "requiresPhoto": True,
        "requiresLocation": False,
        "frequency": Frequency.DAILY.value,
    }


def enhance_with_ai(
    base_text: str,
    category: str,
    difficulty: str,
    variables: dict,
    user_context: Optional[dict] = None,
    location: Optional[dict] = None,
    custom_description: Optional[str] = None,
    people_count: Optional[int] = None,
    api_key: Optional[str] = None,
) -> dict:
    """
    Rewrites a filled template into a catchier title and description.

    Without an API key, or on any model/parsing failure, the filled template
    text is used as-is.
    """
    fallback = _fallback_enhancement(base_text)
    if not api_key:
        return fallback

    prompt = prompts.make_challenge_enhancement_prompt(
        base_text=base_text,
        category=category,
        difficulty=difficulty,
        variables=variables,
        user_context=user_context,
        location=location,
        custom_description=custom_description,
        people_count=people_count,
    )
    try:
        response = gemini.call_predict(prompt, api_key=api_key)
        parsed = extract_json_object(response)
    except (gemini.GeminiInvalidResponseException, ValueError) as e:
        logger.warning("AI enhancement failed, using template: %s", e)
        return fallback
    except Exception as e:
        logger.error("AI enhancement request failed, using template: %s", e)
        return fallback

    return {
        "title": parsed.get("title") or fallback["title"],
        "description": parsed.get("description") or base_text,
        "requiresPhoto": parsed.get("requiresPhoto", True),
        "requiresLocation": parsed.get("requiresLocation", False),
        "frequency": parsed.get("frequency") or Frequency.DAILY.value,
        "location": parsed.get("location") or dict(DEFAULT_LOCATION),
    }


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def generate_from_template(
    category: str,
    difficulty: Optional[str],
    user_context: Optional[dict] = None,
    location: Optional[dict] = None,
    custom_description: Optional[str] = None,
    people_count: Optional[int] = None,
    api_key: Optional[str] = None,
    rng=random,
) -> dict:
    """
    Builds challenge document data (camelCase) from a random template.

    Args:
        category: Template category. Unknown categories use "adventure".
        difficulty: "easy", "medium" or "hard".
        user_context: Profile fields used to personalize the AI rewrite.
        location: Optional {"city", "state"} hint for the AI rewrite.
        custom_description: Free-text request from the user.
        people_count: Group size to tailor the challenge for.
        api_key: Gemini API key; when empty the AI rewrite is skipped.
        rng: Source of randomness (anything with a choice() method).

    Returns:
        dict: Fields for a new challenge document.
    """
    template = select_template(category, rng)
    if template.get("fixed"):
        logger.info("Using fixed template for category %s", category)
        return {
            "title": _capitalize_first(template["template"]),
            "description": template["template"] + " solo",
            "category": category,
            "difficulty": difficulty or Difficulty.EASY.value,
            "points": template.get("base_points") or 10,
            "duration": template.get("base_duration") or 5,
            "requiresPhoto": True,
            "requiresLocation": False,
            "frequency": Frequency.DAILY.value,
            "location": dict(DEFAULT_LOCATION),
        }

    filled_text, variables = fill_template_variables(template, rng)
    enhanced = enhance_with_ai(
        base_text=filled_text,
        category=category,
        difficulty=difficulty,
        variables=variables,
        user_context=user_context,
        location=location,
        custom_description=custom_description,
        people_count=people_count,
        api_key=api_key,
    )

    multiplier = DIFFICULTY_MULTIPLIERS.get(
        difficulty, DIFFICULTY_MULTIPLIERS[Difficulty.MEDIUM]
    )
    return {
        "title": enhanced["title"],
        "description": enhanced["description"],
        "category": category,
        "difficulty": difficulty,
        "points": _round_half_up(template["base_points"] * multiplier["points"]),
        "duration": _round_half_up(template["base_duration"] * multiplier["duration"]),
        "requiresPhoto": enhanced.get("requiresPhoto", True),
        "requiresLocation": enhanced.get("requiresLocation", False),
        "frequency": enhanced.get("frequency") or Frequency.DAILY.value,
        "location": enhanced.get("location") or dict(DEFAULT_LOCATION),
    }


def list_placeholders(template: dict) -> list[str]:
    return re.findall(r"\{(\w+)\}", template["template"])

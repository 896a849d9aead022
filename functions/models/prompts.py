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


import json
from typing import Optional

CHALLENGE_ENHANCEMENT_PROMPT = """
You are Sponta AI, a challenge generator for college students.

BASE CHALLENGE TEMPLATE: "{base_text}"
CATEGORY: {category}
DIFFICULTY: {difficulty}
VARIABLES USED: {variables}
{context_lines}
Enhance this challenge template to make it:
1. More specific and actionable
2. More engaging and fun
3. Unique and creative
4. Appropriate for a college student
{extra_goals}
Return ONLY a JSON object:
{{
  "title": "Catchy, short title (max 50 chars)",
  "description": "Enhanced, engaging description (1-2 sentences)",
  "requiresPhoto": true or false,
  "requiresLocation": true or false,
  "frequency": "daily" or "weekly",
  "location": {{ "type": "anywhere" or "specific" }}
}}

Return ONLY valid JSON, no markdown, no explanations.
"""


def make_challenge_enhancement_prompt(
    base_text: str,
    category: str,
    difficulty: str,
    variables: dict,
    user_context: Optional[dict] = None,
    location: Optional[dict] = None,
    custom_description: Optional[str] = None,
    people_count: Optional[int] = None,
) -> str:
    context_lines = []
    if user_context and user_context.get("displayName"):
        context_lines.append(f"USER: {user_context['displayName']}")
    if location:
        context_lines.append(
            f"LOCATION: {location.get('city', '')}, {location.get('state', '')}"
        )
    if custom_description:
        context_lines.append(f'USER\'S CUSTOM REQUEST: "{custom_description}"')
    if people_count:
        context_lines.append(f"NUMBER OF PEOPLE: {people_count}")

    extra_goals = []
    if custom_description:
        extra_goals.append(
            "5. Incorporate the user's custom request/description into the challenge"
        )
    if people_count:
        extra_goals.append(f"6. Make it suitable for {people_count} people")

    return CHALLENGE_ENHANCEMENT_PROMPT.format(
        base_text=base_text,
        category=category,
        difficulty=difficulty,
        variables=json.dumps(variables),
        context_lines="".join(line + "\n" for line in context_lines),
        extra_goals="".join(line + "\n" for line in extra_goals),
    )


PHOTO_VERIFICATION_SYSTEM_PROMPT = (
    "You are an assistant that verifies whether a selfie or photo is strong "
    "visual evidence that a user completed a challenge in a mobile app. "
    "False positives are much worse than false negatives."
)

PHOTO_VERIFICATION_PROMPT = """
CHALLENGE TASK (from the app):
"{challenge_text}"

RAG CONTEXT (what to look for in the image):
{rag_prompt}

Extra context:
{location_hint}

Look at the attached image and decide if it is strong evidence that the user completed this challenge.

Return ONLY a single JSON object with this exact shape:

{{
  "verified": true or false,
  "confidence": number between 0 and 1,
  "reasoning": "short explanation for the app logs"
}}
"""


def make_photo_verification_prompt(
    challenge_text: str, rag_prompt: str, location: Optional[dict] = None
) -> str:
    if location:
        location_hint = (
            "The app also recorded this approximate location data "
            f"(may be noisy): {json.dumps(location, default=str)}."
        )
    else:
        location_hint = "There is no additional location information."
    return PHOTO_VERIFICATION_PROMPT.format(
        challenge_text=challenge_text,
        rag_prompt=rag_prompt,
        location_hint=location_hint,
    )

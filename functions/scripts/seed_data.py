"""
Populate the configured document store with sample challenges and events.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.db import DocumentStore
from backend.dependencies import get_document_store
from backend.repositories.challenges import ChallengeRepository
from backend.repositories.events import EventRepository
from shared.errors import ValidationError
from shared.time_utils import utc_now
from shared.validators import validate_challenge_schema


logger = logging.getLogger(__name__)

CAMPUS = {"latitude": 40.7128, "longitude": -74.0060}
ANYWHERE = {"type": "anywhere"}

SAMPLE_CHALLENGES = [
    {
        "title": "Try a New Coffee Shop",
        "description": "Visit a coffee shop you've never been to before and try their signature drink.",
        "category": "exploration",
        "difficulty": "easy",
        "points": 10,
        "duration": 30,
        "location": ANYWHERE,
        "requiresPhoto": True,
        "requiresLocation": True,
        "frequency": "daily",
        "isFeatured": True,
    },
    {
        "title": "Strike Up a Conversation",
        "description": "Start a conversation with a stranger and learn something new about them.",
        "category": "social",
        "difficulty": "medium",
        "points": 15,
        "duration": 15,
        "location": ANYWHERE,
        "requiresPhoto": False,
        "requiresLocation": False,
        "frequency": "daily",
        "isFeatured": True,
    },
    {
        "title": "Take a 30-Minute Walk",
        "description": "Go for a 30-minute walk in a new area or park you haven't explored.",
        "category": "fitness",
        "difficulty": "easy",
        "points": 10,
        "duration": 30,
        "location": ANYWHERE,
        "requiresPhoto": True,
        "requiresLocation": True,
        "frequency": "daily",
    },
    {
        "title": "Learn a New Skill",
        "description": "Spend 1 hour learning something completely new: a language, instrument, or craft.",
        "category": "academic",
        "difficulty": "hard",
        "points": 25,
        "duration": 60,
        "location": ANYWHERE,
        "requiresPhoto": True,
        "requiresLocation": False,
        "frequency": "weekly",
        "isFeatured": True,
    },
    {
        "title": "Cook a New Recipe",
        "description": "Try cooking a dish you've never made before from a different cuisine.",
        "category": "creative",
        "difficulty": "medium",
        "points": 20,
        "duration": 60,
        "location": ANYWHERE,
        "requiresPhoto": True,
        "requiresLocation": False,
        "frequency": "weekly",
    },
    {
        "title": "Attend a Campus Event",
        "description": "Go to a campus event, club meeting, or student organization gathering.",
        "category": "social",
        "difficulty": "easy",
        "points": 15,
        "duration": 60,
        "location": {"type": "specific", "coordinates": CAMPUS, "radius": 1000},
        "requiresPhoto": True,
        "requiresLocation": True,
        "frequency": "weekly",
        "isFeatured": True,
    },
    {
        "title": "Meditation Session",
        "description": "Complete a 10-minute meditation or mindfulness session.",
        "category": "wellness",
        "difficulty": "easy",
        "points": 10,
        "duration": 10,
        "location": ANYWHERE,
        "requiresPhoto": False,
        "requiresLocation": False,
        "frequency": "daily",
    },
    {
        "title": "Volunteer for 2 Hours",
        "description": "Spend 2 hours volunteering for a cause you care about.",
        "category": "social",
        "difficulty": "hard",
        "points": 30,
        "duration": 120,
        "location": ANYWHERE,
        "requiresPhoto": True,
        "requiresLocation": True,
        "frequency": "weekly",
        "isFeatured": True,
    },
]


def sample_events() -> list[dict]:
    """Events start one to three days from now so they stay upcoming."""
    now = utc_now()
    return [
        {
            "title": "Campus Food Festival",
            "description": "Join us for a food festival featuring local vendors and student-made dishes!",
            "category": "social",
            "startTime": now + timedelta(days=2),
            "endTime": now + timedelta(days=2, hours=3),
            "location": {
                "name": "Campus Quad",
                "address": "123 University Ave, Campus",
                "coordinates": CAMPUS,
            },
            "minParticipants": 10,
            "maxParticipants": 100,
            "isPublic": True,
            "tags": ["food", "festival", "campus"],
        },
        {
            "title": "Morning Yoga Session",
            "description": "Start your day with a relaxing yoga session in the park.",
            "category": "wellness",
            "startTime": now + timedelta(days=1),
            "endTime": now + timedelta(days=1, hours=1),
            "location": {
                "name": "Central Park",
                "address": "Central Park, New York, NY",
                "coordinates": {"latitude": 40.7829, "longitude": -73.9654},
            },
            "minParticipants": 5,
            "maxParticipants": 30,
            "isPublic": True,
            "tags": ["yoga", "wellness", "morning"],
        },
        {
            "title": "Study Group - Computer Science",
            "description": "Weekly study group for CS students. All levels welcome!",
            "category": "academic",
            "startTime": now + timedelta(days=3),
            "endTime": now + timedelta(days=3, hours=2),
            "location": {
                "name": "Library Study Room 201",
                "address": "University Library, 2nd Floor",
                "coordinates": CAMPUS,
            },
            "minParticipants": 3,
            "maxParticipants": 10,
            "isPublic": True,
            "tags": ["study", "academic", "cs"],
        },
    ]


def seed_challenges(store: DocumentStore) -> list[str]:
    repo = ChallengeRepository(store)
    ids = []
    for data in SAMPLE_CHALLENGES:
        try:
            challenge = repo.create(validate_challenge_schema(data))
        except ValidationError as e:
            logger.error("Failed to create challenge %r: %s", data["title"], e)
            continue
        ids.append(challenge.id)
        logger.info("Created challenge: %s", challenge.title)
    return ids


def seed_events(store: DocumentStore, created_by: str) -> list[str]:
    repo = EventRepository(store)
    ids = []
    for data in sample_events():
        event = repo.create({**data, "createdBy": created_by})
        ids.append(event.id)
        logger.info("Created event: %s", event.title)
    return ids


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed sample challenges and events")
    parser.add_argument(
        "--skip-challenges", action="store_true", help="Do not create challenges"
    )
    parser.add_argument("--skip-events", action="store_true", help="Do not create events")
    parser.add_argument(
        "--created-by",
        default="seed-script",
        help="uid recorded as the creator of seeded events",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    store = get_document_store()

    challenge_ids = [] if args.skip_challenges else seed_challenges(store)
    event_ids = [] if args.skip_events else seed_events(store, args.created_by)

    logger.info(
        "Seeded %d/%d challenges and %d events",
        len(challenge_ids),
        0 if args.skip_challenges else len(SAMPLE_CHALLENGES),
        len(event_ids),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

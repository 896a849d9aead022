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

# Cloud functions for the Sponta backend: scheduled streak maintenance and
# Firestore triggers. The HTTP API itself is served by backend.app.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
from datetime import date
from typing import Optional

# Third-party library imports
from firebase_admin import initialize_app, firestore
from firebase_functions import logger, options, scheduler_fn
from firebase_functions.firestore_fn import (
    on_document_written,
    Event,
    Change,
    DocumentSnapshot,
)

# Local application imports
from backend.db import DocumentStore, FirestoreDocumentStore
from backend.repositories.base import load_document
from backend.repositories.notifications import NotificationRepository
from backend.repositories.user_challenges import UserChallengeRepository
from backend.repositories.users import UserRepository
from backend.services.notifications import NotificationService
from backend.services.streaks import StreakService
from shared.constants import USER_CHALLENGES_COLLECTION
from shared.types import UserChallenge

STREAK_SCHEDULE = "every day 00:00"
STREAK_FUNCTION_TIMEOUT = 540  # seconds

initialize_app()


def _document_store() -> DocumentStore:
    return FirestoreDocumentStore(firestore.client())


def run_streak_maintenance(store: DocumentStore, today: Optional[date] = None) -> dict:
    """Resets lapsed streaks and sends reminders for every user."""
    users = UserRepository(store)
    notifications = NotificationService(NotificationRepository(store), users)
    streaks = StreakService(users, UserChallengeRepository(store), notifications)
    return streaks.run_daily_streak_maintenance(today)


def repair_user_challenge(store: DocumentStore, user_challenge_id: str, data: dict) -> bool:
    """Completes a verified userChallenge that is still marked accepted."""
    user_challenge = load_document(UserChallenge, user_challenge_id, data)
    return UserChallengeRepository(store).repair_verified(user_challenge)


@scheduler_fn.on_schedule(
    schedule=STREAK_SCHEDULE,
    timezone=scheduler_fn.Timezone("UTC"),
    timeout_sec=STREAK_FUNCTION_TIMEOUT,
    memory=options.MemoryOption.MB_512,
)
def send_daily_streak_updates(event: scheduler_fn.ScheduledEvent) -> None:
    result = run_streak_maintenance(_document_store())
    logger.info(
        f"Daily streak updates: {result['reset']} reset, {result['reminded']} reminded"
    )


@on_document_written(document=USER_CHALLENGES_COLLECTION + "/{userChallengeId}")
def on_user_challenge_written(event: Event[Change[DocumentSnapshot]]) -> None:
    """
    Keeps completion state consistent with verification.
    Triggered by any write to a userChallenges document.
    """
    if not event.data.after:
        return

    user_challenge_id = event.params["userChallengeId"]
    after_data = event.data.after.to_dict()
    if not after_data:
        return

    if repair_user_challenge(_document_store(), user_challenge_id, after_data):
        logger.info(f"Marked verified userChallenge {user_challenge_id} as completed")

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

# Firestore collections
USERS_COLLECTION = "users"
CHALLENGES_COLLECTION = "challenges"
USER_CHALLENGES_COLLECTION = "userChallenges"
POSTS_COLLECTION = "communityPosts"
EVENTS_COLLECTION = "events"
NOTIFICATIONS_COLLECTION = "notifications"
DAILY_CHALLENGES_COLLECTION = "dailyChallenges"

CHALLENGE_CATEGORIES = [
    "adventure",
    "social",
    "creative",
    "fitness",
    "academic",
    "wellness",
    "exploration",
]
# Only reachable through templates; never listed to clients.
TEST_CATEGORY = "test"

POINTS_CHALLENGE_COMPLETE = 10
POINTS_EVENT_ATTEND = 15
POINTS_STREAK_BONUS = 5
POINTS_BADGE_EARNED = 25

DEFAULT_USER_LEVEL = 1
DEFAULT_USER_POINTS = 0
DEFAULT_STREAK_COUNT = 0

MIN_USER_AGE_YEARS = 13
DEFAULT_NEARBY_RADIUS_METERS = 5000
DEFAULT_POSTS_LIMIT = 50
DEFAULT_NOTIFICATIONS_LIMIT = 50
MAX_BATCH_GENERATION = 10
MAX_TITLE_LENGTH = 50

PHOTO_UPLOAD_PREFIX = "challenge-photos"
AI_VERIFIER_ID = "sponta-ai"

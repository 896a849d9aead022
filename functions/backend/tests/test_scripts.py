import unittest

from backend.db import InMemoryDocumentStore
from backend.repositories.challenges import ChallengeRepository
from backend.repositories.events import EventRepository
from backend.repositories.user_challenges import UserChallengeRepository
from scripts.fix_verified_challenges import fix_verified_challenges
from scripts.seed_data import SAMPLE_CHALLENGES, seed_challenges, seed_events
from shared.constants import USER_CHALLENGES_COLLECTION


class SeedDataTests(unittest.TestCase):
    def test_seed_creates_challenges_and_events(self):
        store = InMemoryDocumentStore()

        challenge_ids = seed_challenges(store)
        event_ids = seed_events(store, "admin")

        self.assertEqual(len(challenge_ids), len(SAMPLE_CHALLENGES))
        self.assertEqual(len(ChallengeRepository(store).list_active()), len(SAMPLE_CHALLENGES))
        events = EventRepository(store).list_events()
        self.assertEqual(len(events), len(event_ids))
        self.assertEqual(events[0].title, "Morning Yoga Session")
        self.assertTrue(all(event.created_by == "admin" for event in events))


class FixVerifiedChallengesTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.repo = UserChallengeRepository(self.store)

    def _add(self, **fields) -> str:
        user_challenge = self.repo.create("u1", "c1")
        self.store.update(USER_CHALLENGES_COLLECTION, user_challenge.id, fields)
        return user_challenge.id

    def test_fixes_only_verified_records(self):
        broken = self._add(verified=True)
        self._add(verified=True, status="completed")
        untouched = self._add(verified=False)

        summary = fix_verified_challenges(self.repo, dry_run=False)

        self.assertEqual(summary, {"found": 1, "fixed": 1, "errors": 0})
        self.assertEqual(self.repo.get(broken).status, "completed")
        self.assertEqual(self.repo.get(untouched).status, "accepted")

    def test_dry_run_saves_nothing(self):
        broken = self._add(verified=True)
        summary = fix_verified_challenges(self.repo, dry_run=True)
        self.assertEqual(summary["fixed"], 0)
        self.assertEqual(self.repo.get(broken).status, "accepted")


if __name__ == "__main__":
    unittest.main()

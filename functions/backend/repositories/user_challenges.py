"""
Data access for userChallenges, the per-user accept/complete records.
"""

from __future__ import annotations

from typing import List, Optional

from backend.repositories.base import Repository
from shared.constants import USER_CHALLENGES_COLLECTION
from shared.time_utils import utc_now
from shared.types import UserChallenge, UserChallengeStatus


class UserChallengeRepository(Repository[UserChallenge]):
    collection = USER_CHALLENGES_COLLECTION
    model = UserChallenge
    resource_name = "User challenge"

    def create(self, user_id: str, challenge_id: str) -> UserChallenge:
        now = utc_now()
        doc = {
            "userId": user_id,
            "challengeId": challenge_id,
            "status": UserChallengeStatus.ACCEPTED.value,
            "acceptedAt": now,
            "completedAt": None,
            "photoUrl": None,
            "location": None,
            "verified": False,
            "verifiedAt": None,
            "verifiedBy": None,
            "verification": None,
            "pointsEarned": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        doc_id = self.store.add(self.collection, doc)
        return self._load(doc_id, doc)

    def find_for(self, user_id: str, challenge_id: str) -> Optional[UserChallenge]:
        records = self.store.query(
            self.collection,
            [("userId", "==", user_id), ("challengeId", "==", challenge_id)],
            limit=1,
        )
        return self._load(*records[0]) if records else None

    def list_for_user(
        self, user_id: str, status: Optional[str] = None
    ) -> List[UserChallenge]:
        filters = [("userId", "==", user_id)]
        if status:
            filters.append(("status", "==", status))
        return self._load_all(self.store.query(self.collection, filters))

    def list_for_challenge(
        self, challenge_id: str, status: Optional[str] = None
    ) -> List[UserChallenge]:
        filters = [("challengeId", "==", challenge_id)]
        if status:
            filters.append(("status", "==", status))
        return self._load_all(self.store.query(self.collection, filters))

    def complete(
        self,
        user_challenge_id: str,
        photo_url: Optional[str],
        location: Optional[dict],
        verified: bool,
        points_earned: int,
        verified_by: Optional[str] = None,
        verification: Optional[dict] = None,
    ) -> UserChallenge:
        """
        Records a completion attempt.

        Only a verified attempt moves the record to completed and keeps its
        points; otherwise it stays accepted with zero points so the user can
        try again.
        """
        now = utc_now()
        return self.update(
            user_challenge_id,
            {
                "status": (
                    UserChallengeStatus.COMPLETED.value
                    if verified
                    else UserChallengeStatus.ACCEPTED.value
                ),
                "completedAt": now if verified else None,
                "photoUrl": photo_url or None,
                "location": location or None,
                "verified": verified,
                "verifiedAt": now if verified else None,
                "verifiedBy": verified_by if verified else None,
                "verification": verification,
                "pointsEarned": points_earned if verified else 0,
            },
        )

    def list_verified_not_completed(self) -> List[UserChallenge]:
        records = self.store.query(self.collection, [("verified", "==", True)])
        return [
            uc
            for uc in self._load_all(records)
            if uc.status != UserChallengeStatus.COMPLETED
        ]

    def repair_verified(self, user_challenge: UserChallenge) -> bool:
        """
        Marks a verified record as completed if an earlier write missed it.

        Returns True when the record was changed.
        """
        if (
            not user_challenge.verified
            or user_challenge.status == UserChallengeStatus.COMPLETED
        ):
            return False
        self.update(
            user_challenge.id,
            {
                "status": UserChallengeStatus.COMPLETED.value,
                "completedAt": user_challenge.completed_at or utc_now(),
            },
        )
        return True

import os
import unittest
from datetime import timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient

from backend.app import create_app
from backend.auth import AuthUser, InMemoryAuthClient
from backend.config import get_settings
from backend.db import InMemoryDocumentStore
from backend.dependencies import get_auth_client, get_document_store, get_storage_client
from backend.repositories.challenges import ChallengeRepository
from backend.repositories.events import EventRepository
from backend.repositories.users import UserRepository
from backend.storage import InMemoryStorageClient
from challenges.verification import REASON_NO_API_KEY, REASON_PHOTO_NOT_ALLOWED
from shared.api import AiVerification
from shared.time_utils import utc_now


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        env = patch.dict(
            os.environ,
            {"GEMINI_API_KEY": "", "SPONTA_USE_IN_MEMORY_BACKENDS": "true"},
        )
        env.start()
        self.addCleanup(env.stop)
        get_settings.cache_clear()
        self.addCleanup(get_settings.cache_clear)

        self.store = InMemoryDocumentStore()
        self.storage = InMemoryStorageClient()
        self.auth = InMemoryAuthClient()

        self.app = create_app()
        self.app.dependency_overrides[get_document_store] = lambda: self.store
        self.app.dependency_overrides[get_storage_client] = lambda: self.storage
        self.app.dependency_overrides[get_auth_client] = lambda: self.auth
        self.client = TestClient(self.app)

    def login(self, uid="user-1", phone_number="+15551234567", **profile) -> dict:
        self.auth.add_user(AuthUser(uid=uid, phone_number=phone_number))
        UserRepository(self.store).create(
            uid, {"displayName": profile.pop("displayName", "Test User"), **profile}
        )
        return {"Authorization": f"Bearer {self.auth.issue_token(uid)}"}

    def make_challenge(self, **overrides) -> str:
        data = {
            "title": "Sunrise walk",
            "description": "Walk somewhere new before 8am",
            "category": "exploration",
            "difficulty": "easy",
            "points": 15,
            **overrides,
        }
        return ChallengeRepository(self.store).create(data).id


class HealthAndErrorTests(ApiTestCase):
    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "OK")
        self.assertEqual(body["message"], "SPONTA API is running")
        self.assertIn("timestamp", body)

    def test_unknown_route(self):
        response = self.client.get("/api/nothing-here")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(),
            {
                "success": False,
                "error": "Not Found",
                "message": "Route /api/nothing-here not found",
            },
        )

    def test_unhandled_error_returns_500(self):
        headers = self.login()
        client = TestClient(self.app, raise_server_exceptions=False)
        with patch(
            "backend.services.users.UserService.get_stats",
            side_effect=RuntimeError("boom"),
        ):
            response = client.get("/api/users/stats", headers=headers)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["message"], "Internal server error")


class AuthTests(ApiTestCase):
    def test_missing_token(self):
        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, 401)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"], "UnauthorizedError")
        self.assertEqual(body["message"], "No token provided")

    def test_rejected_tokens(self):
        self.login()
        expired = self.auth.issue_token("user-1")
        self.auth.expired_tokens.add(expired)
        revoked = self.auth.issue_token("user-1")
        self.auth.revoked_tokens.add(revoked)

        cases = {
            expired: "Token expired",
            revoked: "Token revoked",
            "garbage": "Invalid token",
            "token-unknown-abcdef": "Invalid or expired token",
        }
        for token, message in cases.items():
            response = self.client.get(
                "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
            )
            self.assertEqual(response.status_code, 401, token)
            self.assertEqual(response.json()["message"], message)

    def test_signup_creates_profile(self):
        response = self.client.post(
            "/api/auth/signup",
            json={
                "phoneNumber": "+15557654321",
                "displayName": "  <Jamie>  ",
                "dateOfBirth": "2001-04-02",
                "college": {"name": "State U", "verified": False},
            },
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["success"])
        user = body["data"]["user"]
        self.assertEqual(user["displayName"], "Jamie")
        self.assertEqual(user["points"], 0)
        self.assertEqual(user["level"], 1)
        self.assertEqual(user["friendRequests"], {"sent": [], "received": []})
        self.assertTrue(user["privacySettings"]["showOnLeaderboard"])

        duplicate = self.client.post(
            "/api/auth/signup",
            json={
                "phoneNumber": "+15557654321",
                "displayName": "Other",
                "dateOfBirth": "2001-04-02",
            },
        )
        self.assertEqual(duplicate.status_code, 409)
        self.assertEqual(
            duplicate.json()["message"], "User with this phone number already exists"
        )

    def test_signup_validation_errors(self):
        response = self.client.post(
            "/api/auth/signup",
            json={
                "phoneNumber": "not-a-phone",
                "displayName": "Kid",
                "dateOfBirth": (utc_now() - timedelta(days=365 * 5)).isoformat(),
            },
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "ValidationError")
        fields = {error["field"] for error in body["errors"]}
        self.assertIn("dateOfBirth", fields)
        self.assertIn("phoneNumber", fields)

    def test_signup_rejects_malformed_coordinates(self):
        response = self.client.post(
            "/api/auth/signup",
            json={
                "phoneNumber": "+1 (555) 123-4567",
                "displayName": "Sam",
                "dateOfBirth": "2000-01-01",
                "location": {"coordinates": "42,-71"},
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["errors"],
            [
                {
                    "field": "coordinates",
                    "message": "Latitude and longitude must be numbers",
                }
            ],
        )

    def test_signup_email(self):
        response = self.client.post(
            "/api/auth/signup-email",
            json={
                "email": "sam@example.edu",
                "displayName": "Sam",
                "dateOfBirth": "2000-01-01",
            },
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"]["user"]["email"], "sam@example.edu")

        missing = self.client.post(
            "/api/auth/signup-email",
            json={"displayName": "Sam", "dateOfBirth": "2000-01-01"},
        )
        self.assertEqual(missing.status_code, 400)
        self.assertEqual(missing.json()["message"], "Missing required fields: email")

    def test_signin_creates_missing_profile(self):
        self.auth.add_user(AuthUser(uid="new-user", email="new@example.edu"))
        token = self.auth.issue_token("new-user")
        response = self.client.post(
            "/api/auth/signin", headers={"Authorization": f"Bearer {token}"}
        )
        self.assertEqual(response.status_code, 200)
        user = response.json()["data"]["user"]
        self.assertEqual(user["uid"], "new-user")
        self.assertEqual(user["displayName"], "User")
        self.assertIsNotNone(UserRepository(self.store).find("new-user"))

    def test_verify_phone_requires_phone(self):
        self.auth.add_user(AuthUser(uid="email-only", email="e@example.edu"))
        token = self.auth.issue_token("email-only")
        response = self.client.post(
            "/api/auth/verify-phone", headers={"Authorization": f"Bearer {token}"}
        )
        self.assertEqual(response.status_code, 400)

        headers = self.login()
        response = self.client.post("/api/auth/verify-phone", headers=headers)
        self.assertEqual(
            response.json()["data"], {"verified": True, "phoneNumber": "+15551234567"}
        )


class UserTests(ApiTestCase):
    def test_profile_update_is_whitelisted(self):
        headers = self.login()
        response = self.client.put(
            "/api/users/profile",
            headers=headers,
            json={
                "displayName": "Renamed",
                "preferredCategories": ["fitness", "test"],
                "points": 9999,
            },
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["displayName"], "Renamed")
        self.assertEqual(data["preferredCategories"], ["fitness", "test"])
        self.assertEqual(data["points"], 0)

        bad = self.client.put(
            "/api/users/profile",
            headers=headers,
            json={"preferredDifficulty": "impossible"},
        )
        self.assertEqual(bad.status_code, 400)

    def test_friend_flow(self):
        alice = self.login("alice", "+15550000001", displayName="Alice")
        bob = self.login("bob", "+15550000002", displayName="Bob")

        sent = self.client.post(
            "/api/users/friends/request", headers=alice, json={"friendUid": "bob"}
        )
        self.assertEqual(sent.status_code, 200)
        again = self.client.post(
            "/api/users/friends/request", headers=alice, json={"friendUid": "bob"}
        )
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()["message"], "Friend request already sent")
        self_request = self.client.post(
            "/api/users/friends/request", headers=alice, json={"friendUid": "alice"}
        )
        self.assertEqual(self_request.status_code, 409)

        accepted = self.client.post("/api/users/friends/accept/alice", headers=bob)
        self.assertEqual(accepted.status_code, 200)

        friends = self.client.get("/api/users/friends", headers=alice).json()["data"]
        self.assertEqual([f["uid"] for f in friends], ["bob"])
        self.assertEqual(friends[0]["displayName"], "Bob")
        self.assertNotIn("phoneNumber", friends[0])

        removed = self.client.delete("/api/users/friends/bob", headers=alice)
        self.assertEqual(removed.status_code, 200)
        self.assertEqual(self.client.get("/api/users/friends", headers=bob).json()["data"], [])
        missing = self.client.delete("/api/users/friends/bob", headers=alice)
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["message"], "Friend not found")

    def test_accept_without_request(self):
        headers = self.login("alice", "+15550000001")
        self.login("bob", "+15550000002")
        response = self.client.post("/api/users/friends/accept/bob", headers=headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Friend request not found")


class ChallengeTests(ApiTestCase):
    def test_list_is_public_and_paginated(self):
        for i in range(3):
            self.make_challenge(title=f"Challenge {i}")
        self.make_challenge(title="Retired", isActive=False)

        response = self.client.get("/api/challenges", params={"limit": 2})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body["data"]), 2)
        self.assertEqual(
            body["pagination"], {"page": 1, "limit": 2, "total": 3, "totalPages": 2}
        )

    def test_static_routes(self):
        categories = self.client.get("/api/challenges/categories").json()["data"]
        self.assertIn("adventure", categories)
        self.assertNotIn("test", categories)
        info = self.client.get("/api/challenges/generate/info").json()["data"]
        self.assertEqual(info["difficulties"]["medium"]["points"], 20)

    def test_get_missing_challenge(self):
        response = self.client.get("/api/challenges/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Challenge not found")

    def test_nearby_requires_coordinates(self):
        response = self.client.get("/api/challenges/nearby", params={"lat": 10})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"], "Latitude and longitude are required"
        )

    def test_nearby_sorts_by_distance(self):
        far = self.make_challenge(
            title="Far", location={"coordinates": {"latitude": 40.02, "longitude": -74.0}}
        )
        near = self.make_challenge(
            title="Near", location={"coordinates": {"latitude": 40.001, "longitude": -74.0}}
        )
        self.make_challenge(
            title="Elsewhere", location={"coordinates": {"latitude": 41.0, "longitude": -74.0}}
        )
        response = self.client.get(
            "/api/challenges/nearby", params={"lat": 40.0, "lng": -74.0}
        )
        data = response.json()["data"]
        self.assertEqual([c["id"] for c in data], [near, far])
        self.assertLess(data[0]["distance"], data[1]["distance"])

    def test_accept_then_complete_verified(self):
        headers = self.login()
        challenge_id = self.make_challenge()

        not_accepted = self.client.post(
            f"/api/challenges/{challenge_id}/complete",
            headers=headers,
            json={"photoUrl": "challenge-photos/user-1/a.jpg"},
        )
        self.assertEqual(not_accepted.status_code, 404)
        self.assertEqual(
            not_accepted.json()["message"],
            "Challenge not accepted. Please accept the challenge first.",
        )

        accepted = self.client.post(
            f"/api/challenges/{challenge_id}/accept", headers=headers
        )
        self.assertEqual(accepted.status_code, 200)
        self.assertEqual(accepted.json()["data"]["userChallenge"]["status"], "accepted")
        again = self.client.post(f"/api/challenges/{challenge_id}/accept", headers=headers)
        self.assertEqual(again.status_code, 409)

        verification = AiVerification(verified=True, confidence=0.92, reasoning="Looks right")
        with patch(
            "backend.services.challenges.verify_challenge_photo",
            return_value=verification,
        ):
            response = self.client.post(
                f"/api/challenges/{challenge_id}/complete",
                headers=headers,
                json={"photoUrl": "challenge-photos/user-1/a.jpg"},
            )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["pointsEarned"], 15)
        self.assertEqual(data["userChallenge"]["status"], "completed")
        self.assertEqual(data["userChallenge"]["verifiedBy"], "sponta-ai")
        self.assertTrue(data["aiVerification"]["verified"])
        self.assertEqual(data["streak"]["currentStreak"], 1)
        self.assertEqual(data["challenge"]["totalCompletions"], 1)
        self.assertEqual(data["challenge"]["totalAccepts"], 1)

        user = UserRepository(self.store).get("user-1")
        self.assertEqual(user.points, 15)
        self.assertEqual(user.current_streak, 1)

        progress = self.client.get(
            f"/api/challenges/{challenge_id}/progress", headers=headers
        ).json()["data"]
        self.assertTrue(progress["hasAccepted"])
        self.assertTrue(progress["isCompleted"])

        history = self.client.get(
            "/api/users/completion-history", headers=headers
        ).json()["data"]
        self.assertEqual(history[0]["challenge"]["id"], challenge_id)

        unread = self.client.get(
            "/api/notifications/unread/count", headers=headers
        ).json()["data"]
        self.assertEqual(unread, {"count": 1})

        done = self.client.post(
            f"/api/challenges/{challenge_id}/complete",
            headers=headers,
            json={"photoUrl": "challenge-photos/user-1/b.jpg"},
        )
        self.assertEqual(done.status_code, 409)

    def test_unverified_completion_can_be_retried(self):
        headers = self.login()
        challenge_id = self.make_challenge()
        self.client.post(f"/api/challenges/{challenge_id}/accept", headers=headers)

        response = self.client.post(
            f"/api/challenges/{challenge_id}/complete",
            headers=headers,
            json={"photoUrl": "https://example.test/photo.jpg"},
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertFalse(data["aiVerification"]["verified"])
        self.assertEqual(data["aiVerification"]["reasoning"], REASON_NO_API_KEY)
        self.assertEqual(data["pointsEarned"], 0)
        self.assertEqual(data["userChallenge"]["status"], "accepted")
        self.assertIsNone(data["streak"])

    def test_completion_rejects_photos_the_user_does_not_own(self):
        os.environ["GEMINI_API_KEY"] = "test-key"
        get_settings.cache_clear()
        headers = self.login()
        challenge_id = self.make_challenge()
        self.client.post(f"/api/challenges/{challenge_id}/accept", headers=headers)
        self.storage.stored_objects["challenge-photos/victim/selfie.jpg"] = b"victim"

        with patch(
            "challenges.verification.gemini.call_predict_with_image"
        ) as mock_predict, patch("challenges.verification.requests.get") as mock_get:
            for photo_url in [
                "challenge-photos/victim/selfie.jpg",
                "http://127.0.0.1:9000/computeMetadata/v1/token",
            ]:
                response = self.client.post(
                    f"/api/challenges/{challenge_id}/complete",
                    headers=headers,
                    json={"photoUrl": photo_url},
                )
                self.assertEqual(response.status_code, 200)
                data = response.json()["data"]
                self.assertFalse(data["aiVerification"]["verified"])
                self.assertEqual(
                    data["aiVerification"]["reasoning"], REASON_PHOTO_NOT_ALLOWED
                )
                self.assertEqual(data["userChallenge"]["status"], "accepted")
        mock_predict.assert_not_called()
        mock_get.assert_not_called()
        self.assertEqual(UserRepository(self.store).get("user-1").points, 0)

        mine = self.client.get(
            "/api/challenges/my", headers=headers, params={"status": "accepted"}
        ).json()["data"]
        self.assertEqual(len(mine), 1)

    def test_daily_challenge_is_cached_per_day(self):
        headers = self.login(preferredCategories=["fitness", "test"])
        first = self.client.get("/api/challenges/daily", headers=headers)
        self.assertEqual(first.status_code, 200)
        challenge = first.json()["data"]
        self.assertEqual(challenge["category"], "test")
        self.assertEqual(challenge["title"], "Drink water")

        second = self.client.get(
            "/api/challenges/daily", headers=headers, params={"timezone": "Not/AZone"}
        ).json()["data"]
        self.assertEqual(second["id"], challenge["id"])

        forced = self.client.get(
            "/api/challenges/daily",
            headers=headers,
            params={"forceRegenerate": "true"},
        ).json()["data"]
        self.assertNotEqual(forced["id"], challenge["id"])

    def test_generate_and_batch_limits(self):
        headers = self.login()
        response = self.client.post(
            "/api/challenges/generate",
            headers=headers,
            json={"category": "social", "difficulty": "hard"},
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["category"], "social")
        self.assertEqual(data["difficulty"], "hard")
        self.assertTrue(data["isActive"])

        too_many = self.client.post(
            "/api/challenges/generate/batch", headers=headers, json={"count": 11}
        )
        self.assertEqual(too_many.status_code, 400)
        self.assertEqual(
            too_many.json()["message"], "Cannot generate more than 10 challenges at once"
        )

        with patch("backend.services.challenge_generation.time.sleep") as sleep:
            batch = self.client.post(
                "/api/challenges/generate/batch",
                headers=headers,
                json={"count": 3, "category": "wellness"},
            )
        self.assertEqual(batch.status_code, 201)
        result = batch.json()["data"]
        self.assertEqual(result["successCount"], 3)
        self.assertEqual(result["totalRequested"], 3)
        self.assertEqual(result["errors"], [])
        self.assertEqual(sleep.call_count, 2)

    def test_generate_requires_auth(self):
        response = self.client.post("/api/challenges/generate", json={})
        self.assertEqual(response.status_code, 401)


class EventTests(ApiTestCase):
    def event_payload(self, **overrides) -> dict:
        return {
            "title": "Frisbee on the quad",
            "description": "Bring a friend",
            "startTime": (utc_now() + timedelta(days=2)).isoformat(),
            "location": {
                "name": "Main Quad",
                "coordinates": {"latitude": 40.0, "longitude": -74.0},
            },
            **overrides,
        }

    def test_create_rejects_malformed_coordinates(self):
        host = self.login("host", "+15550000001")
        response = self.client.post(
            "/api/events",
            headers=host,
            json=self.event_payload(location={"coordinates": [42.0, -71.0]}),
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "ValidationError")
        self.assertEqual(body["errors"][0]["field"], "coordinates")

    def test_create_join_leave(self):
        host = self.login("host", "+15550000001")
        guest = self.login("guest", "+15550000002")

        created = self.client.post("/api/events", headers=host, json=self.event_payload())
        self.assertEqual(created.status_code, 201)
        event = created.json()["data"]
        self.assertEqual(event["createdBy"], "host")
        self.assertEqual(event["status"], "upcoming")
        self.assertEqual(event["participants"], [])

        joined = self.client.post(f"/api/events/{event['id']}/join", headers=guest)
        self.assertEqual(joined.status_code, 200)
        self.assertEqual(joined.json()["data"]["participants"], ["guest"])
        twice = self.client.post(f"/api/events/{event['id']}/join", headers=guest)
        self.assertEqual(twice.status_code, 409)

        left = self.client.post(f"/api/events/{event['id']}/leave", headers=guest)
        self.assertEqual(left.json()["data"]["participants"], [])
        not_member = self.client.post(f"/api/events/{event['id']}/leave", headers=guest)
        self.assertEqual(not_member.status_code, 409)

    def test_private_and_full_events(self):
        headers = self.login()
        repo = EventRepository(self.store)
        private = repo.create({"title": "Private", "isPublic": False, "createdBy": "x"})
        full = repo.create(
            {"title": "Full", "maxParticipants": 1, "participants": ["x"], "createdBy": "x"}
        )

        response = self.client.post(f"/api/events/{private.id}/join", headers=headers)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message"], "This event is private")
        response = self.client.post(f"/api/events/{full.id}/join", headers=headers)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message"], "This event is full")

    def test_validation_and_update_rules(self):
        host = self.login("host", "+15550000001")
        other = self.login("other", "+15550000002")

        past = self.client.post(
            "/api/events",
            headers=host,
            json=self.event_payload(startTime="2001-01-01T00:00:00Z"),
        )
        self.assertEqual(past.status_code, 400)

        event_id = self.client.post(
            "/api/events", headers=host, json=self.event_payload()
        ).json()["data"]["id"]
        forbidden = self.client.put(
            f"/api/events/{event_id}", headers=other, json={"title": "Hijacked"}
        )
        self.assertEqual(forbidden.status_code, 403)
        updated = self.client.put(
            f"/api/events/{event_id}", headers=host, json={"title": "Ultimate"}
        )
        self.assertEqual(updated.json()["data"]["title"], "Ultimate")

    def test_list_and_nearby_are_public(self):
        headers = self.login()
        self.client.post("/api/events", headers=headers, json=self.event_payload())
        listed = self.client.get("/api/events", params={"isPublic": "true"}).json()
        self.assertEqual(listed["pagination"]["total"], 1)
        nearby = self.client.get(
            "/api/events/nearby", params={"lat": 40.0, "lng": -74.0, "radius": 100}
        ).json()["data"]
        self.assertEqual(len(nearby), 1)
        self.assertEqual(nearby[0]["distance"], 0)


class PostTests(ApiTestCase):
    def test_post_lifecycle(self):
        author = self.login("author", "+15550000001", displayName="Riley")
        reader = self.login("reader", "+15550000002")

        empty = self.client.post("/api/posts", headers=author, json={})
        self.assertEqual(empty.status_code, 400)
        self.assertEqual(
            empty.json()["message"], "Post must have either a caption or an image"
        )

        created = self.client.post(
            "/api/posts", headers=author, json={"caption": "Finished my run!"}
        )
        self.assertEqual(created.status_code, 201)
        post = created.json()["data"]
        self.assertEqual(post["username"], "Riley")
        self.assertEqual(post["likes"], 0)
        self.assertIsNotNone(post["timestamp"])

        liked = self.client.post(f"/api/posts/{post['id']}/like", headers=reader)
        self.assertEqual(liked.json()["data"]["likes"], 1)
        self.assertEqual(liked.json()["data"]["likedBy"], ["reader"])
        unliked = self.client.post(f"/api/posts/{post['id']}/like", headers=reader)
        self.assertEqual(unliked.json()["data"]["likes"], 0)

        forbidden = self.client.put(
            f"/api/posts/{post['id']}", headers=reader, json={"caption": "mine now"}
        )
        self.assertEqual(forbidden.status_code, 403)
        self.assertEqual(
            forbidden.json()["message"], "You can only update your own posts"
        )

        listed = self.client.get("/api/posts").json()["data"]
        self.assertEqual([p["id"] for p in listed], [post["id"]])
        by_user = self.client.get("/api/posts/user/author").json()["data"]
        self.assertEqual(len(by_user), 1)

        deleted = self.client.delete(f"/api/posts/{post['id']}", headers=author)
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(self.client.get(f"/api/posts/{post['id']}").status_code, 404)

    def test_username_falls_back_to_email(self):
        self.auth.add_user(AuthUser(uid="u", email="casey@example.edu"))
        UserRepository(self.store).create("u", {"email": "casey@example.edu"})
        headers = {"Authorization": f"Bearer {self.auth.issue_token('u')}"}
        post = self.client.post(
            "/api/posts", headers=headers, json={"imageUrl": "https://img.test/a.jpg"}
        ).json()["data"]
        self.assertEqual(post["username"], "casey")


class NotificationTests(ApiTestCase):
    def test_inbox_operations(self):
        headers = self.login()
        other = self.login("other", "+15550000002")

        reminder = self.client.post("/api/notifications/streak-reminder", headers=headers)
        self.assertEqual(reminder.status_code, 200)
        notification = reminder.json()["data"]
        self.assertEqual(notification["type"], "streak_reminder")
        self.assertEqual(notification["priority"], "high")

        listed = self.client.get("/api/notifications", headers=headers).json()["data"]
        self.assertEqual(len(listed), 1)

        foreign = self.client.put(
            f"/api/notifications/{notification['id']}/read", headers=other
        )
        self.assertEqual(foreign.status_code, 404)

        marked = self.client.put(
            f"/api/notifications/{notification['id']}/read", headers=headers
        )
        self.assertEqual(marked.status_code, 200)
        unread = self.client.get(
            "/api/notifications", headers=headers, params={"unreadOnly": "true"}
        ).json()["data"]
        self.assertEqual(unread, [])

        self.client.post("/api/notifications/streak-reminder", headers=headers)
        read_all = self.client.put("/api/notifications/read-all", headers=headers)
        self.assertEqual(read_all.json()["data"], {"count": 1})

        deleted = self.client.delete(
            f"/api/notifications/{notification['id']}", headers=headers
        )
        self.assertEqual(deleted.status_code, 200)
        cleared = self.client.delete("/api/notifications/read", headers=headers)
        self.assertEqual(cleared.json()["data"], {"count": 1})


class StorageTests(ApiTestCase):
    def test_sign_url(self):
        headers = self.login()
        get_url = self.client.get(
            "/api/storage/sign-url",
            headers=headers,
            params={"path": "challenge-photos/someone-else/bar.png"},
        )
        self.assertEqual(get_url.status_code, 200)
        self.assertIn("challenge-photos/someone-else/bar.png", get_url.json()["data"]["url"])
        self.assertEqual(get_url.json()["data"]["method"], "GET")

        for path in ["foo/bar.png", "challenge-photos-backup/a.png", "challenge-photos"]:
            outside_get = self.client.get(
                "/api/storage/sign-url", headers=headers, params={"path": path}
            )
            self.assertEqual(outside_get.status_code, 403, path)
            self.assertEqual(outside_get.json()["error"], "ForbiddenError")

        dotted = self.client.get(
            "/api/storage/sign-url",
            headers=headers,
            params={"path": "challenge-photos/../secrets.json"},
        )
        self.assertEqual(dotted.status_code, 400)

        put_url = self.client.get(
            "/api/storage/sign-url",
            headers=headers,
            params={"path": "challenge-photos/user-1/a.jpg", "op": "put"},
        )
        self.assertEqual(put_url.status_code, 200)
        self.assertEqual(put_url.json()["data"]["method"], "PUT")

        outside = self.client.get(
            "/api/storage/sign-url",
            headers=headers,
            params={"path": "challenge-photos/someone-else/a.jpg", "op": "put"},
        )
        self.assertEqual(outside.status_code, 403)

    def test_sign_url_requires_auth(self):
        response = self.client.get("/api/storage/sign-url", params={"path": "a.png"})
        self.assertEqual(response.status_code, 401)


if __name__ == "__main__":
    unittest.main()

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


import unittest
from unittest.mock import MagicMock, patch

import requests

from challenges import verification
from models.gemini import GeminiInvalidResponseException


class FakeStorage:
    def __init__(self, objects):
        self.objects = objects

    def get_bytes(self, path):
        if path not in self.objects:
            raise FileNotFoundError(path)
        return self.objects[path]


CHALLENGE = {
    "title": "Morning run",
    "description": "Go for a 2km jog",
    "category": "fitness",
}


class PickRagContextTest(unittest.TestCase):

    def test_matches_first_entry_with_tag(self):
        self.assertEqual(
            verification.pick_rag_context({"title": "Explore the park"})["id"],
            "outdoor_generic",
        )
        self.assertEqual(
            verification.pick_rag_context({"category": "social"})["id"],
            "social_selfie",
        )
        self.assertEqual(
            verification.pick_rag_context(CHALLENGE)["id"], "exercise_generic"
        )

    def test_defaults_when_nothing_matches(self):
        self.assertEqual(
            verification.pick_rag_context({"title": "Drink water"})["id"], "default"
        )


class VerifyChallengePhotoTest(unittest.TestCase):

    def test_missing_api_key(self):
        result = verification.verify_challenge_photo(
            CHALLENGE, "challenge-photos/u1/a.jpg", "u1", api_key=None
        )
        self.assertFalse(result.verified)
        self.assertEqual(result.confidence, 0)
        self.assertEqual(result.reasoning, verification.REASON_NO_API_KEY)

    def test_missing_photo(self):
        result = verification.verify_challenge_photo(CHALLENGE, "", "u1", api_key="key")
        self.assertEqual(result.reasoning, verification.REASON_NO_PHOTO)

    @patch("challenges.verification.gemini.call_predict_with_image")
    def test_verified_from_storage_path(self, mock_predict):
        mock_predict.return_value = (
            '{"verified": true, "confidence": 1.7, "reasoning": "Running outside."}'
        )
        storage = FakeStorage({"challenge-photos/u1/run.png": b"png-bytes"})

        result = verification.verify_challenge_photo(
            CHALLENGE,
            "challenge-photos/u1/run.png",
            "u1",
            location={"latitude": 1.0, "longitude": 2.0},
            api_key="key",
            storage_client=storage,
        )

        self.assertTrue(result.verified)
        self.assertEqual(result.confidence, 1.0)
        self.assertEqual(result.reasoning, "Running outside.")
        args, kwargs = mock_predict.call_args
        self.assertEqual(args[1], b"png-bytes")
        self.assertEqual(kwargs["mime_type"], "image/png")
        self.assertIn("Morning run - Go for a 2km jog", args[0])
        self.assertIn('"latitude": 1.0', args[0])
        self.assertIn("False positives are much worse", kwargs["system_instruction"])

    @patch("challenges.verification.gemini.call_predict_with_image")
    @patch("challenges.verification.requests.get")
    def test_downloads_photo_from_storage_host(self, mock_get, mock_predict):
        response = MagicMock()
        response.content = b"jpeg-bytes"
        response.headers = {"Content-Type": "image/jpeg"}
        response.is_redirect = False
        mock_get.return_value = response
        mock_predict.return_value = '{"verified": false, "confidence": 0.2}'
        url = (
            "https://firebasestorage.googleapis.com/v0/b/sponta.appspot.com/o/"
            "challenge-photos%2Fu1%2Frun.jpg?alt=media"
        )

        result = verification.verify_challenge_photo(CHALLENGE, url, "u1", api_key="key")

        mock_get.assert_called_once_with(url, timeout=30, allow_redirects=False)
        self.assertFalse(result.verified)
        self.assertEqual(result.confidence, 0.2)
        self.assertEqual(result.reasoning, verification.REASON_MISSING)

    @patch("challenges.verification.gemini.call_predict_with_image")
    @patch("challenges.verification.requests.get")
    def test_rejects_urls_outside_storage(self, mock_get, mock_predict):
        for url in [
            "http://127.0.0.1:8080/computeMetadata/v1/token",
            "https://169.254.169.254/challenge-photos/u1/a.jpg",
            "http://storage.googleapis.com/bucket/challenge-photos/u1/a.jpg",
            "https://storage.googleapis.com:8443/bucket/challenge-photos/u1/a.jpg",
            "https://evil@storage.googleapis.com/bucket/challenge-photos/u1/a.jpg",
            "https://storage.googleapis.com/bucket/other/a.jpg",
            "https://storage.googleapis.com/bucket/challenge-photos/u1/../u2/a.jpg",
        ]:
            result = verification.verify_challenge_photo(
                CHALLENGE, url, "u1", api_key="key"
            )
            self.assertFalse(result.verified, url)
            self.assertEqual(
                result.reasoning, verification.REASON_PHOTO_NOT_ALLOWED, url
            )
        mock_get.assert_not_called()
        mock_predict.assert_not_called()

    @patch("challenges.verification.gemini.call_predict_with_image")
    def test_rejects_other_users_photos(self, mock_predict):
        mock_predict.return_value = '{"verified": true, "confidence": 0.9}'
        storage = FakeStorage(
            {
                "challenge-photos/victim/selfie.jpg": b"victim",
                "private/config.json": b"secret",
            }
        )
        for reference in [
            "challenge-photos/victim/selfie.jpg",
            "challenge-photos/u1/../victim/selfie.jpg",
            "private/config.json",
            "https://firebasestorage.googleapis.com/v0/b/sponta.appspot.com/o/"
            "challenge-photos%2Fvictim%2Fselfie.jpg?alt=media",
        ]:
            result = verification.verify_challenge_photo(
                CHALLENGE, reference, "u1", api_key="key", storage_client=storage
            )
            self.assertFalse(result.verified, reference)
            self.assertEqual(
                result.reasoning, verification.REASON_PHOTO_NOT_ALLOWED, reference
            )
        mock_predict.assert_not_called()

    def test_rejects_every_photo_without_user(self):
        result = verification.verify_challenge_photo(
            CHALLENGE,
            "challenge-photos/u1/a.jpg",
            None,
            api_key="key",
            storage_client=FakeStorage({"challenge-photos/u1/a.jpg": b"x"}),
        )
        self.assertEqual(result.reasoning, verification.REASON_PHOTO_NOT_ALLOWED)

    def test_custom_allowed_hosts(self):
        with self.assertRaises(verification.PhotoNotAllowedError):
            verification.fetch_photo_bytes(
                "https://firebasestorage.googleapis.com/v0/b/x/o/challenge-photos%2Fu1%2Fa.jpg",
                "u1",
                allowed_hosts=["photos.sponta.test"],
            )

    @patch("challenges.verification.gemini.call_predict_with_image")
    def test_unexpected_format(self, mock_predict):
        mock_predict.return_value = "The person is clearly running."
        result = verification.verify_challenge_photo(
            CHALLENGE,
            "challenge-photos/u1/p.jpg",
            "u1",
            api_key="key",
            storage_client=FakeStorage({"challenge-photos/u1/p.jpg": b"x"}),
        )
        self.assertFalse(result.verified)
        self.assertEqual(result.reasoning, verification.REASON_BAD_FORMAT)

    @patch("challenges.verification.gemini.call_predict_with_image")
    def test_empty_model_response(self, mock_predict):
        mock_predict.side_effect = GeminiInvalidResponseException()
        result = verification.verify_challenge_photo(
            CHALLENGE,
            "challenge-photos/u1/p.jpg",
            "u1",
            api_key="key",
            storage_client=FakeStorage({"challenge-photos/u1/p.jpg": b"x"}),
        )
        self.assertEqual(result.reasoning, verification.REASON_BAD_FORMAT)

    @patch("challenges.verification.requests.get")
    def test_download_failure_is_api_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("boom")
        result = verification.verify_challenge_photo(
            CHALLENGE,
            "https://storage.googleapis.com/bucket/challenge-photos/u1/p.jpg",
            "u1",
            api_key="key",
        )
        self.assertFalse(result.verified)
        self.assertEqual(result.reasoning, verification.REASON_API_ERROR)

    @patch("challenges.verification.requests.get")
    def test_redirect_is_api_error(self, mock_get):
        response = MagicMock()
        response.is_redirect = True
        mock_get.return_value = response
        result = verification.verify_challenge_photo(
            CHALLENGE,
            "https://storage.googleapis.com/bucket/challenge-photos/u1/p.jpg",
            "u1",
            api_key="key",
        )
        self.assertEqual(result.reasoning, verification.REASON_API_ERROR)

    def test_missing_storage_object_is_api_error(self):
        result = verification.verify_challenge_photo(
            CHALLENGE,
            "challenge-photos/u1/nope.jpg",
            "u1",
            api_key="key",
            storage_client=FakeStorage({}),
        )
        self.assertEqual(result.reasoning, verification.REASON_API_ERROR)


if __name__ == "__main__":
    unittest.main()

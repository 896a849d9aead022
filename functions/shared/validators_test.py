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

from shared import validators
from shared.errors import ValidationError


def error_fields(error: ValidationError) -> list:
    return [item["field"] for item in error.errors]


class ValidateRequiredTest(unittest.TestCase):

    def test_reports_every_missing_field(self):
        with self.assertRaises(ValidationError) as cm:
            validators.validate_required(
                {"title": "x", "description": "", "points": None}, ["title", "description", "points"]
            )
        self.assertEqual(cm.exception.message, "Missing required fields: description, points")
        self.assertEqual(error_fields(cm.exception), ["description", "points"])

    def test_zero_and_false_are_present(self):
        validators.validate_required({"points": 0, "isPublic": False}, ["points", "isPublic"])


class ValidatePhoneTest(unittest.TestCase):

    def test_strips_formatting_before_matching(self):
        for phone in ["+1 (555) 123-4567", "555-123-4567", "+44 20 7946 0958", "15551234567"]:
            validators.validate_phone(phone)

    def test_invalid_numbers(self):
        for phone in ["not-a-phone", "+0123456", "1", "+1234567890123456", "555.123.4567"]:
            with self.assertRaises(ValidationError, msg=phone) as cm:
                validators.validate_phone(phone)
            self.assertEqual(error_fields(cm.exception), ["phoneNumber"])

    def test_empty_is_skipped(self):
        validators.validate_phone(None)
        validators.validate_phone("")


class ValidateEmailTest(unittest.TestCase):

    def test_valid(self):
        validators.validate_email("sam@example.edu")
        validators.validate_email("first.last+tag@mail.school.ac.uk")

    def test_invalid(self):
        for email in ["sam", "sam@example", "sam @example.edu", "@example.edu", "sam@@example.edu"]:
            with self.assertRaises(ValidationError, msg=email) as cm:
                validators.validate_email(email)
            self.assertEqual(error_fields(cm.exception), ["email"])


class ValidateCoordinatesTest(unittest.TestCase):

    def test_range_limits_are_inclusive(self):
        validators.validate_coordinates({"latitude": 90, "longitude": 180})
        validators.validate_coordinates({"latitude": -90, "longitude": -180})
        validators.validate_coordinates({"latitude": 0.0, "longitude": 0.0})

    def test_out_of_range(self):
        with self.assertRaises(ValidationError) as cm:
            validators.validate_coordinates({"latitude": 90.1, "longitude": 0})
        self.assertEqual(error_fields(cm.exception), ["latitude"])
        with self.assertRaises(ValidationError) as cm:
            validators.validate_coordinates({"latitude": 0, "longitude": -180.5})
        self.assertEqual(error_fields(cm.exception), ["longitude"])

    def test_non_numeric_and_malformed(self):
        for coordinates in [
            {"latitude": "42", "longitude": -71},
            {"latitude": True, "longitude": -71},
            {"latitude": 42},
            {},
            [42.0, -71.0],
            "42,-71",
            7,
        ]:
            with self.assertRaises(ValidationError, msg=repr(coordinates)) as cm:
                validators.validate_coordinates(coordinates)
            self.assertEqual(
                cm.exception.errors,
                [{"field": "coordinates", "message": "Latitude and longitude must be numbers"}],
            )

    def test_missing_is_skipped(self):
        validators.validate_coordinates(None)
        validators.validate_coordinates("")


class SanitizeStringTest(unittest.TestCase):

    def test_trims_and_removes_angle_brackets(self):
        self.assertEqual(
            validators.sanitize_string("  <script>hi</script>  "), "scripthi/script"
        )

    def test_non_strings_pass_through(self):
        self.assertEqual(validators.sanitize_string(5), 5)
        self.assertIsNone(validators.sanitize_string(None))


class ValidatePaginationTest(unittest.TestCase):

    def test_defaults(self):
        self.assertEqual(validators.validate_pagination(), {"page": 1, "limit": 10})
        self.assertEqual(
            validators.validate_pagination("abc", "xyz"), {"page": 1, "limit": 10}
        )
        self.assertEqual(validators.validate_pagination("0", "0"), {"page": 1, "limit": 10})

    def test_parses_strings(self):
        self.assertEqual(validators.validate_pagination("3", "100"), {"page": 3, "limit": 100})

    def test_page_below_one(self):
        with self.assertRaises(ValidationError) as cm:
            validators.validate_pagination(-1, 10)
        self.assertEqual(cm.exception.message, "Page must be greater than 0")
        self.assertEqual(error_fields(cm.exception), ["page"])

    def test_limit_out_of_range(self):
        for limit in [101, -5]:
            with self.assertRaises(ValidationError, msg=limit) as cm:
                validators.validate_pagination(1, limit)
            self.assertEqual(cm.exception.message, "Limit must be between 1 and 100")
            self.assertEqual(error_fields(cm.exception), ["limit"])


class ValidateUserSchemaTest(unittest.TestCase):

    def test_collects_field_errors(self):
        with self.assertRaises(ValidationError) as cm:
            validators.validate_user_schema(
                {
                    "phoneNumber": "0123",
                    "email": "nope",
                    "displayName": "Sam",
                    "dateOfBirth": "2000-01-01",
                    "location": {"coordinates": [1, 2]},
                }
            )
        self.assertEqual(
            error_fields(cm.exception), ["phoneNumber", "email", "coordinates"]
        )

    def test_sanitizes_copy(self):
        data = {
            "phoneNumber": "+15551234567",
            "displayName": " <Sam> ",
            "dateOfBirth": "2000-01-01",
            "college": {"name": "<State>"},
        }
        sanitized = validators.validate_user_schema(data)
        self.assertEqual(sanitized["displayName"], "Sam")
        self.assertEqual(sanitized["college"]["name"], "State")
        self.assertEqual(data["college"]["name"], "<State>")


if __name__ == "__main__":
    unittest.main()

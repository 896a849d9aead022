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

from shared import geo_utils

LONDON = (51.5074, -0.1278)
PARIS = (48.8566, 2.3522)


def at(latitude, longitude):
    return {"coordinates": {"latitude": latitude, "longitude": longitude}}


class CalculateDistanceTest(unittest.TestCase):

    def test_same_point(self):
        self.assertEqual(geo_utils.calculate_distance(*LONDON, *LONDON), 0)

    def test_one_degree_of_latitude(self):
        # Arc length of one degree on a 6371 km sphere.
        self.assertAlmostEqual(
            geo_utils.calculate_distance(0, 0, 1, 0), 111194.93, delta=0.01
        )

    def test_london_to_paris(self):
        distance = geo_utils.calculate_distance(*LONDON, *PARIS)
        self.assertAlmostEqual(distance, 343_500, delta=1_000)
        self.assertAlmostEqual(
            distance, geo_utils.calculate_distance(*PARIS, *LONDON), places=6
        )


class FilterNearbyTest(unittest.TestCase):

    def test_keeps_items_within_radius_nearest_first(self):
        items = [
            {"id": "far", "location": at(40.05, -74.0)},
            {"id": "near", "location": at(40.001, -74.0)},
            {"id": "none", "location": None},
            {"id": "bad", "location": {"coordinates": [40.0, -74.0]}},
            {"id": "mid", "location": at(40.02, -74.0)},
        ]

        nearby = geo_utils.filter_nearby(
            items, 40.0, -74.0, 5000, lambda item: item["location"]
        )

        self.assertEqual([item["id"] for item, _ in nearby], ["near", "mid"])
        self.assertLess(nearby[0][1], nearby[1][1])
        self.assertAlmostEqual(nearby[0][1], 111.19, delta=0.01)


class ParseLatLngTest(unittest.TestCase):

    def test_parses_profile_string(self):
        self.assertEqual(
            geo_utils.parse_lat_lng("37.77, -122.42"),
            {"latitude": 37.77, "longitude": -122.42},
        )

    def test_rejects_unparseable(self):
        for value in [None, "", "37.77", "north,west", "nan,1", 42]:
            self.assertIsNone(geo_utils.parse_lat_lng(value), value)


if __name__ == "__main__":
    unittest.main()

# Copyright 2026 castline.fm
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

"""
Unit tests for web response helpers.
"""

import json

from castline.services.listing import Listing
from castline.web.responses import api_response, error_response, list_response, listing_response


class TestApiResponse:
    """Tests for api_response helper."""

    def test_basic_response_has_status(self):
        """Empty response is just the success status."""
        assert api_response() == {"status": "success"}

    def test_response_wraps_data(self):
        """Data goes under the data key."""
        result = api_response({"user": "alice"})

        assert result == {"status": "success", "data": {"user": "alice"}}

    def test_message_only(self):
        result = api_response(message="Podcast is deleted")

        assert result == {"status": "success", "message": "Podcast is deleted"}

    def test_extra_top_level_fields(self):
        result = api_response({"items": []}, results=0)

        assert result["results"] == 0


class TestListResponses:
    """Tests for list and listing envelopes."""

    def test_list_response_counts_items(self):
        result = list_response([{"id": "a"}, {"id": "b"}], "podcasts")

        assert result == {"status": "success", "data": {"podcasts": [{"id": "a"}, {"id": "b"}]}, "results": 2}

    def test_listing_response_includes_docs_count(self):
        """docsCount comes from the listing, results from the page size."""
        listing = Listing(documents=[{"id": "a"}], docs_count=40, page=3, limit=1)

        result = listing_response(listing, "users")

        assert result["results"] == 1
        assert result["docsCount"] == 40
        assert result["data"] == {"users": [{"id": "a"}]}


class TestErrorResponse:
    """Tests for error envelopes."""

    def test_client_error_is_fail(self):
        response = error_response(404, "Not found")

        assert response.status_code == 404
        assert json.loads(response.body) == {"status": "fail", "message": "Not found"}

    def test_server_error_is_error(self):
        response = error_response(500, "Something went wrong")

        assert json.loads(response.body)["status"] == "error"

    def test_headers_are_passed_through(self):
        response = error_response(401, "Unauthorized", headers={"WWW-Authenticate": "Bearer"})

        assert response.headers["WWW-Authenticate"] == "Bearer"

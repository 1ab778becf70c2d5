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
Response helpers for the castline web API.

Every endpoint answers with the same envelope:

    success: {"status": "success", "data": ..., "results"?: n, "docsCount"?: n}
    4xx:     {"status": "fail", "message": "..."}
    5xx:     {"status": "error", "message": "..."}
"""

from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse

from ..services.listing import Listing


def api_response(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """
    Wrap data in the success envelope.

    Example:
        >>> api_response({"user": {...}})
        {"status": "success", "data": {"user": {...}}}
    """
    body: Dict[str, Any] = {"status": "success"}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def list_response(items: List[Any], key: str) -> Dict[str, Any]:
    """
    Envelope for an unpaginated list (e.g. search results).

    Example:
        >>> list_response([{"id": "a"}], "podcasts")
        {"status": "success", "data": {"podcasts": [{"id": "a"}]}, "results": 1}
    """
    return api_response({key: items}, results=len(items))


def listing_response(listing: Listing, key: str) -> Dict[str, Any]:
    """
    Envelope for a composed listing.

    ``results`` is the size of this page; ``docsCount`` counts every document
    matching the filters, independent of page and limit.
    """
    return api_response(
        {key: listing.documents},
        results=len(listing.documents),
        docsCount=listing.docs_count,
    )


def error_response(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    """Render an error envelope ("fail" for 4xx, "error" for 5xx)."""
    status = "fail" if status_code < 500 else "error"
    return JSONResponse(status_code=status_code, content={"status": status, "message": message}, headers=headers)

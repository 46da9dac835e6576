"""Post-deploy smoke checks executed from the app container."""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from uuid import uuid4

BASE_URL = "http://localhost:8000"
API_PREFIX = "/api/v1"
ADMIN_REF = "deploy-smoke"


def request(
    path: str,
    *,
    method: str = "GET",
    body: dict | None = None,
    expected: int = 200,
) -> bytes:
    payload = None
    req_headers = {"Accept": "application/json", "X-Admin-Ref": ADMIN_REF}
    if body is not None:
        payload = json.dumps(body).encode("utf-8")
        req_headers["Content-Type"] = "application/json"

    request_obj = urllib.request.Request(
        f"{BASE_URL}{path}",
        data=payload,
        method=method,
        headers=req_headers,
    )
    try:
        with urllib.request.urlopen(request_obj, timeout=30) as response:
            content = response.read()
            status = response.getcode()
    except urllib.error.HTTPError as exc:  # pragma: no cover - runtime smoke script
        body_text = exc.read().decode("utf-8", errors="ignore")
        if exc.code == expected:
            return body_text.encode("utf-8")
        raise RuntimeError(f"{method} {path} -> {exc.code}: {body_text}") from exc

    if status != expected:
        raise RuntimeError(f"{method} {path} -> {status}, expected {expected}")
    return content


def request_json(path: str, **kwargs) -> dict:
    return json.loads(request(path, **kwargs).decode("utf-8"))


def main() -> None:
    for endpoint in ["/health", "/ready", "/docs", "/metrics"]:
        request(endpoint, expected=200)

    suffix = uuid4().hex[:10]
    booking = request_json(
        f"{API_PREFIX}/workflow/guest_booking",
        method="POST",
        body={"owner_ref": f"deploy-smoke-{suffix}@example.com", "price": "1.00", "message": "smoke"},
        expected=201,
    )
    booking_path = f"{API_PREFIX}/workflow/guest_booking/{booking['id']}"
    request(f"{booking_path}/confirm", method="POST", expected=200)
    request(f"{booking_path}/complete", method="POST", expected=422)
    request(f"{booking_path}/mark_paid", method="POST", expected=200)
    completed = request_json(f"{booking_path}/complete", method="POST", expected=200)
    if "accrue_revenue" not in completed["effects"]:
        raise RuntimeError(f"Completed booking did not accrue revenue: {completed}")
    request(f"{booking_path}/complete", method="POST", expected=409)

    series_name = f"Deploy smoke {suffix}"
    first = request_json(
        f"{API_PREFIX}/courses",
        method="POST",
        body={"title": "Part", "series_name": series_name},
        expected=201,
    )
    next_part = request_json(f"{API_PREFIX}/courses/series/next-part?series_name={urllib.parse.quote(series_name)}")
    if next_part["next_part_number"] != first["course"]["part_number"] + 1:
        raise RuntimeError(f"Unexpected next part: {next_part}")
    request(f"{API_PREFIX}/courses/{first['course']['id']}", method="DELETE", expected=204)

    request(f"{API_PREFIX}/admin/overview", expected=200)
    print("Deploy smoke checks passed")


if __name__ == "__main__":
    main()

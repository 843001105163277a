#!/usr/bin/env python3
"""Smoke check against a running server.

Usage:
    uvicorn courtwatch.main:app --reload
    python test_api.py [base_url]
"""

import sys
from datetime import date

import requests

BASE_URL = sys.argv[1].rstrip("/") if len(sys.argv) > 1 else "http://localhost:8000"


def check_health():
    """Health endpoint reports a connected database."""
    print("Checking health endpoint...")
    response = requests.get(f"{BASE_URL}/api/health")
    print(f"  Status: {response.status_code}")
    print(f"  Response: {response.json()}")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"
    print("  ✓ Health check passed\n")


def check_venues():
    """Venue catalogue is served."""
    print("Checking venue listing...")
    response = requests.get(f"{BASE_URL}/api/venues")
    print(f"  Status: {response.status_code}")
    venues = response.json()["venues"]
    print(f"  Found {len(venues)} venue(s)")
    assert venues
    print("  ✓ Venue listing passed\n")
    return venues


def check_availability(venue_slug):
    """Availability for today at one venue."""
    today = date.today().isoformat()
    print(f"Checking availability for {venue_slug} on {today}...")
    response = requests.get(f"{BASE_URL}/api/availability", params={"venue": venue_slug, "date": today})
    print(f"  Status: {response.status_code}")
    assert response.status_code == 200

    data = response.json()
    available = [s for s in data["slots"] if s["status"] == "available"]
    print(f"  {len(data['slots'])} slot(s), {len(available)} available")
    print(f"  Last updated: {data['lastUpdated']}")
    print("  ✓ Availability passed\n")


def check_missing_parameters():
    """Availability without parameters is a 400."""
    print("Checking availability validation...")
    response = requests.get(f"{BASE_URL}/api/availability")
    print(f"  Status: {response.status_code}")
    assert response.status_code == 400
    print("  ✓ Validation passed\n")


def check_auth_required():
    """Account endpoints need a session."""
    print("Checking that account endpoints require a session...")
    for path in ["/api/user/me", "/api/watches", "/api/channels", "/api/admin/stats"]:
        response = requests.get(f"{BASE_URL}{path}")
        print(f"  {path}: {response.status_code}")
        assert response.status_code == 401
    print("  ✓ Auth checks passed\n")


def check_robots():
    """robots.txt is served."""
    print("Checking robots.txt...")
    response = requests.get(f"{BASE_URL}/robots.txt")
    print(f"  Status: {response.status_code}")
    assert response.status_code == 200
    assert "User-agent" in response.text
    print("  ✓ robots.txt passed\n")


def check_api_docs():
    """Check that API docs are accessible."""
    print("Checking API documentation...")
    response = requests.get(f"{BASE_URL}/docs")
    print(f"  Status: {response.status_code}")
    assert response.status_code == 200
    print("  ✓ API docs accessible at /docs\n")


def main():
    """Run all checks."""
    print("=" * 60)
    print("TIME FOR TENNIS - API SMOKE CHECK")
    print("=" * 60)
    print()

    try:
        check_health()
        check_api_docs()
        check_robots()

        venues = check_venues()
        check_availability(venues[0]["slug"])
        check_missing_parameters()
        check_auth_required()

        print("=" * 60)
        print("ALL CHECKS PASSED! ✓")
        print("=" * 60)
        print()
        print("Next steps:")
        print(f"1. Open {BASE_URL}/docs to explore the API")
        print(f"2. Trigger a scrape: curl -X POST -H 'Authorization: Bearer $CRON_SECRET' {BASE_URL}/api/cron/scrape")
        print()

    except requests.exceptions.ConnectionError:
        print("\n❌ ERROR: Could not connect to the API")
        print("   Make sure the server is running:")
        print("   uvicorn courtwatch.main:app --reload")
        print()
    except AssertionError as e:
        print(f"\n❌ CHECK FAILED: {e}")
        print()
    except Exception as e:
        print(f"\n❌ ERROR: {e}")
        print()


if __name__ == "__main__":
    main()

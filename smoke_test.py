#!/usr/bin/env python3
"""
Smoke test for a MediEcho deployment
Checks that the public routes answer and that protected ones refuse anonymous calls
"""
import os
import sys

import requests

# Base URL - override with SMOKE_BASE_URL
BASE_URL = os.getenv("SMOKE_BASE_URL", "http://localhost:8000").rstrip("/")

# (path, name, expected status)
ROUTES = [
    ("/health", "Health", 200),
    ("/api/subscription/plans", "Plans", 200),
    ("/api/briefs", "Briefs (anonymous)", 401),
    ("/api/logs", "Logs (anonymous)", 401),
]


def test_route(path, name, expected):
    """Test a single route"""
    url = BASE_URL + path
    try:
        response = requests.get(url, timeout=10)
        if response.status_code == expected:
            print(f"✓ {name:20} - OK ({expected})")
            return True
        else:
            print(f"✗ {name:20} - FAILED (Status: {response.status_code}, expected {expected})")
            return False
    except requests.exceptions.RequestException as e:
        print(f"✗ {name:20} - ERROR: {str(e)}")
        return False


def main():
    """Run smoke tests"""
    print(f"\nRunning smoke tests on {BASE_URL}\n")
    print("-" * 50)

    results = [test_route(path, name, expected) for path, name, expected in ROUTES]

    print("-" * 50)
    passed = sum(results)
    total = len(results)
    print(f"\nPassed: {passed}/{total}")

    if passed == total:
        print("All smoke tests passed!")
        sys.exit(0)
    else:
        print("Some tests failed")
        sys.exit(1)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Check that the configured routing service answers route and matrix requests."""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from route_engine.config import settings
from route_engine.services.routing.provider_client import HEALTH_CHECK_COORDS, RoutingProviderClient


def main():
    print("=" * 60)
    print("Routing Service Connection Test")
    print("=" * 60)
    print()

    print("1. Checking routing configuration...")
    if not settings.routing_base_url:
        print("   [ERROR] Routing base URL is not configured")
        print("   Please set ROUTE_ENGINE_ROUTING_BASE_URL in your .env file")
        return 1
    print(f"   [OK] Provider: {settings.routing_provider}")
    print(f"   [OK] Base URL: {settings.routing_base_url}")
    print(f"   [OK] Profile: {settings.routing_profile}")
    print()

    client = RoutingProviderClient()

    print("2. Testing route request...")
    route = client.route(HEALTH_CHECK_COORDS)
    if route is None:
        print("   [ERROR] Route request failed (see log output)")
        return 1
    print(f"   [OK] {len(route.coordinates)} geometry points")
    print(f"   [OK] Distance: {route.distance_m:.0f} m, duration: {route.duration_s:.0f} s")
    print()

    print("3. Testing distance matrix request...")
    matrix = client.distance_matrix(HEALTH_CHECK_COORDS)
    if matrix is None:
        print("   [ERROR] Matrix request failed (see log output)")
        return 1
    print(f"   [OK] Received {len(matrix)}x{len(matrix[0])} distance matrix")
    print(f"   [OK] Sample distance: {matrix[0][1]:.2f} meters")
    print()

    print("=" * 60)
    print("[SUCCESS] Routing service is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())

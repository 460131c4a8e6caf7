#!/usr/bin/env python3
"""
Branch Webhook Sample Sender

Posts a sample Branch INSTALL webhook to a running relay, for checking an
Amplitude project end to end.

Usage:
    python scripts/send_sample.py [relay_url]

relay_url defaults to http://localhost:8000. BRANCH_TOKEN is read from the
environment or .env.
"""

import asyncio
import json
import os
import sys
import time

import httpx
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

SAMPLE_PAYLOAD = {
    "name": "INSTALL",
    "id": "sample-event-0001",
    "timestamp": int(time.time()),
    "user_data": {
        "idfa": "00000000-0000-0000-0000-000000000001",
        "os": "iOS",
        "os_version": "17.4",
        "app_version": "1.0.0",
        "device_model": "iPhone15,2",
    },
    "last_attributed_touch_data": {
        "channel": "Sample Channel",
        "campaign": "relay-smoke-test",
        "ad_partner": "Branch",
        "feature": "marketing",
        "link_id": "sample-link",
        "web_to_app": False,
    },
}


async def main():
    relay_url = (sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000").rstrip("/")
    token = os.environ.get("BRANCH_TOKEN", "")
    if not token:
        print("ERROR: BRANCH_TOKEN not set in environment or .env")
        sys.exit(1)

    print(f"Posting sample INSTALL webhook to {relay_url}/api/branch-to-amplitude")
    print(json.dumps(SAMPLE_PAYLOAD, indent=2))
    print()

    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.post(
            f"{relay_url}/api/branch-to-amplitude",
            headers={"Authorization": f"Bearer {token}"},
            json=SAMPLE_PAYLOAD,
        )

    print(f"Status: {response.status_code}")
    print(response.text)
    if not response.is_success:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())

#!/usr/bin/env python3
"""
Register this deployment's webhook URL with Viber.

Usage:
    python src/scripts/set_viber_webhook.py
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import PUBLIC_BASE_URL, VIBER_BOT_TOKEN
from services.viber import set_webhook


def main():
    if not VIBER_BOT_TOKEN or not PUBLIC_BASE_URL:
        print("VIBER_BOT_TOKEN and PUBLIC_BASE_URL must both be set")
        sys.exit(1)

    url = f"{PUBLIC_BASE_URL.rstrip('/')}/webhook/viber"
    result = set_webhook(VIBER_BOT_TOKEN, url)
    print(f"Webhook set to {url}")
    print(f"Event types: {', '.join(result.get('event_types', []))}")


if __name__ == "__main__":
    main()

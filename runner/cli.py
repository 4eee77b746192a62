from __future__ import annotations

import argparse
import os


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the smoke runner."""
    parser = argparse.ArgumentParser(description="reCAPTCHA relay smoke runner")
    parser.add_argument("--base-url", default=os.getenv("BASE_URL", "http://127.0.0.1:3000"))
    parser.add_argument(
        "--token",
        default=os.getenv("RECAPTCHA_TEST_TOKEN", "smoke-test-token"),
        help="Token to submit; a made-up one exercises the invalid-token path",
    )
    parser.add_argument("--timeout", type=float, default=20.0, help="Seconds to wait for /health")
    return parser.parse_args(argv)

"""Application configuration loaded from environment variables."""

import os

from dotenv import load_dotenv

from .constants import EMAIL_CODE_OPTION_SELECTOR

load_dotenv()

# Credentials (passed through to the login form as-is)
GOOGLE_EMAIL = os.getenv("GOOGLE_EMAIL", "")
GOOGLE_PASSWORD = os.getenv("GOOGLE_PASSWORD", "")

# Gateway
GATEWAY_HOST = os.getenv("GATEWAY_HOST", "0.0.0.0")
GATEWAY_PORT = int(os.getenv("GATEWAY_PORT", "3000"))
GATEWAY_URL = os.getenv("GATEWAY_URL", f"http://127.0.0.1:{GATEWAY_PORT}")
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")

# Browser
BROWSER_HEADLESS = os.getenv("BROWSER_HEADLESS", "true").lower() == "true"
NAVIGATION_TIMEOUT_MS = int(os.getenv("NAVIGATION_TIMEOUT_MS", "10000"))
CHALLENGE_WAIT_TIMEOUT_MS = int(os.getenv("CHALLENGE_WAIT_TIMEOUT_MS", "15000"))

# Verification code bridge
CHALLENGE_CODE_SOURCE = os.getenv("CHALLENGE_CODE_SOURCE", "console").lower()
CHALLENGE_HOST = os.getenv("CHALLENGE_HOST", "127.0.0.1")
CHALLENGE_PORT = int(os.getenv("CHALLENGE_PORT", "3001"))
CHALLENGE_URL = os.getenv("CHALLENGE_URL", f"http://{CHALLENGE_HOST}:{CHALLENGE_PORT}")
CHALLENGE_CODE_TIMEOUT = float(os.getenv("CHALLENGE_CODE_TIMEOUT", "0"))  # 0 = wait forever
VERIFICATION_OPTION_SELECTOR = os.getenv(
    "VERIFICATION_OPTION_SELECTOR", EMAIL_CODE_OPTION_SELECTOR
)

# Cache
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "0"))  # 0 = unbounded

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

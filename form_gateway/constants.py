"""Identity provider URLs, CSS selectors, and error messages."""

# ── URLs ─────────────────────────────────────────────────────────────────────

IDENTITY_PROVIDER_URL = "https://accounts.google.com/"

# ── Login Selectors ──────────────────────────────────────────────────────────

SELECTORS = {
    # Identifier step
    "identifier_input": "#identifierId",
    "identifier_next": "#identifierNext",

    # Whatever follows the identifier step
    "next_step": "#passwordNext, #totpPin, #challenge",

    # Password step
    "password_input": "input[name='Passwd']",
    "password_next": "#passwordNext",

    # One-time code step
    "code_input": 'input[name="totpPin"], input[type="tel"]',
    "code_submit": "#totpNext, #submitChallenge",
}

# ── Challenge Detection ──────────────────────────────────────────────────────

# Presence of any of these means a verification step replaced the password prompt
CHALLENGE_MARKERS = (
    "#challenge",
    ".d2CFce",
)

# "Get a verification code at <address>" option on the challenge picker
EMAIL_CODE_OPTION_SELECTOR = 'div[data-challengetype="12"]'

CODE_PROMPT = "Enter the verification code sent to your Gmail: "

# ── Error Messages ───────────────────────────────────────────────────────────

ERROR_URL_REQUIRED = "URL is required and must be a string"
ERROR_NOT_INITIALIZED = "Browser not initialized"
ERROR_FETCH_FAILED = "Failed to fetch form"
ERROR_OPTION_NOT_FOUND = "Gmail verification option not found."

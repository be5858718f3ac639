"""
Credential Configuration - Single Source of Truth

Google OAuth scopes, token location and Slack token variables live here.
Do not duplicate elsewhere.
"""

import os
from pathlib import Path

# Package root (where this file lives)
_PACKAGE_ROOT = Path(__file__).parent

# Read-only: the archivers never modify mail or calendars
SCOPES = [
    'https://www.googleapis.com/auth/gmail.readonly',
    'https://www.googleapis.com/auth/calendar.readonly',
]

# Already-authorized user token (google-auth "authorized_user" JSON).
# Absolute path so it works regardless of cwd; MUNIMENT_TOKEN_FILE overrides.
TOKEN_FILE = Path(os.environ.get('MUNIMENT_TOKEN_FILE', _PACKAGE_ROOT / 'token.json'))

# Slack token sources, checked in this order
SLACK_TOKEN_ENV_VARS = ('SLACK_BOT_TOKEN', 'SLACK_USER_TOKEN')

# Bot tokens see only channels the bot was invited to; user tokens see everything the user can
SLACK_TOKEN_PREFIXES = ('xoxp-', 'xoxb-')

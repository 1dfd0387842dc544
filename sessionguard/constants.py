"""
Shared constants for the session guard.

Timing defaults mirror the CMS control panel: the session is checked every
minute and the user is warned once less than two minutes remain.
"""

# Seconds between passive session-info polls
CHECK_INTERVAL = 60

# Below this many remaining seconds the logout warning is shown
MIN_SAFE_SESSION_TIME = 120

# Sentinel for "session state unknown", synthesized on transport failure
UNKNOWN_REMAINING_TIME = -1

# Client-side minimum before the Sign in button is enabled
MIN_PASSWORD_LENGTH = 6

# Countdown tick for the warning message (display only)
COUNTDOWN_TICK = 1.0

# User-facing messages
MSG_SESSION_EXPIRING = 'Your session will expire in {time}.'
MSG_SESSION_ENDED = 'Your session has ended.'
MSG_LOG_BACK_IN = 'Log back in.'
MSG_SERVER_ERROR = 'A server error occurred.'
MSG_PASSWORD_PLACEHOLDER = 'Password'
MSG_MFA_CODE_PLACEHOLDER = 'Verification code'

LABEL_SIGN_OUT_NOW = 'Sign out now'
LABEL_KEEP_SIGNED_IN = 'Keep me signed in'
LABEL_SIGN_IN = 'Sign in'
LABEL_SIGN_IN_SECURITY_KEY = 'Sign in with a security key'
LABEL_VERIFY = 'Verify'
LABEL_USE_SECURITY_KEY = 'Use a security key to login'
LABEL_USE_PASSWORD = 'Use a password to login'

"""Application constants.

Product names, the custom link scheme, default hosts and timeouts used by the
host registry and the add-server form.
"""

from pathlib import Path

# Base paths
PACKAGE_ROOT = Path(__file__).resolve().parent

APP_NAME = "ServerDeck"
ORGANIZATION = "ServerDeck"

# Custom URI scheme: serverdeck://<host>[?insecure=true]
PROTOCOL_SCHEME = "serverdeck"

# Used when the add-server form is submitted empty
DEFAULT_INSTANCE = "https://open.rocket.chat"
# Bare words typed into the form are tried as <word>.<DEFAULT_DOMAIN>
DEFAULT_DOMAIN = "rocket.chat"

# Servers reporting this title get the url appended, except on the canonical host
GENERIC_TITLE = "Rocket.Chat"
CANONICAL_TITLE_HOST = "open.rocket.chat"

# Host check (GET <host>/api/info)
VALIDATION_TIMEOUT_SEC = 5.0
FORM_VALIDATION_TIMEOUT_SEC = 2.0

# Legacy server list imported once when no hosts are configured (title -> url)
SERVERS_MANIFEST = "servers.json"

# Persisted state files inside the state dir
STATE_FILE = "state.json"
CERTIFICATE_FILE = "certificate.json"

# New-version prompts are switched off; the update flow is not wired in.
UPDATE_NOTIFICATIONS_ENABLED = False

# Server icon shown in the server list, relative to the server url
FAVICON_PATH = "/assets/favicon.svg"

"""
Configuration
Protocol constants and environment-driven settings for Strongbox.

Protocol constants are fixed; changing them changes which seeds, entropy
values and keys an instance accepts. Settings below them can be tuned per
deployment through environment variables.
"""

import os


# Protocol constants
INITIAL_SEED_LEN = 32   # minimum bytes of seed at instantiation
ENTROPY_LEN = 20        # minimum bytes of caller entropy per key
DIGEST_SIZE = 32        # SHA-256
KEY_MATERIAL_SIZE = 32  # bytes of derived key material before encoding
VIEWING_KEY_PREFIX = "strongbox_key_"

# Store layout
OWNER_KEY = "owner"
BOX_KEY = "box"
SEED_KEY = "seed"
VIEWER_KEYS_PREFIX = "viewer_keys/"
VIEWER_COUNTERS_PREFIX = "viewer_counters/"
ENTROPY_PREFIX = "entropy/"

# Deployment settings
STORE_DIR = os.getenv("STRONGBOX_STORE_DIR", "./strongbox-state")
LOG_LEVEL = os.getenv("STRONGBOX_LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("STRONGBOX_LOG_FILE", "")

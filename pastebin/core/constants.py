"""Core constants: paste naming, password policy and store key layout."""

import re

# Alphabet for generated names and passwords (no look-alike characters).
CHAR_GEN = "ABCDEFGHJKMNPQRSTWXYZabcdefhijkmnprstwxyz2345678"

PASTE_NAME_LEN = 4
PRIVATE_PASTE_NAME_LEN = 24
DEFAULT_PASSWD_LEN = 24

# Caller-chosen names are stored with this prefix; generated names never contain it.
CUSTOM_NAME_PREFIX = "~"
NAME_REGEX = re.compile(r"^[a-zA-Z0-9+_\-\[\]*$@,;]{3,}$")

MIN_PASSWD_LEN = 8
MAX_PASSWD_LEN = 128

# Current on-store metadata schema version.
PASTE_SCHEMA_VERSION = 1

# Backing stores commonly reject TTLs shorter than 60s.
MIN_PHYSICAL_TTL_SECONDS = 70
# Metadata of large-store pastes outlives logical expiry so the sweep can see it.
LARGE_STORE_GRACE_SECONDS = 2 * 24 * 60 * 60

ACCESS_COUNT_PROBABILITY = 0.01
# S3 DeleteObjects accepts at most 1000 keys per request.
SWEEP_BATCH_SIZE = 1000

KV_KEY_SEP = ":"

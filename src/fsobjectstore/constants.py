"""Constants for fsobjectstore."""

# Defaults
DEFAULT_DATA_DIR = "/data"
DEFAULT_BUCKET = "store"
DEFAULT_DEBUG = False
DEFAULT_SHARD_LENGTH = 2
DEFAULT_LOCKING = False

# Environment variables
ENV_DATA_DIR = "FSSTORE_DATA_DIR"
ENV_BUCKET = "FSSTORE_BUCKET"
ENV_DEBUG = "FSSTORE_DEBUG"
ENV_SHARD_LENGTH = "FSSTORE_SHARD_LENGTH"
ENV_LOCKING = "FSSTORE_LOCKING"

# SHA-256 hex digest length
CID_LENGTH = 64

# Modes for entries created by the store (umask applies)
DIR_MODE = 0o777
FILE_MODE = 0o666

# Seconds a locked write waits for a concurrent writer
LOCK_TIMEOUT = 300

# Entries under a bucket starting with this prefix are store bookkeeping
HIDDEN_PREFIX = "."
LOCK_DIR = ".locks"
TEMP_PREFIX = ".tmp-"

# Read chunk size for file digests
CHUNK_SIZE = 8192

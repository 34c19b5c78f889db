# Freshness window in seconds: one day less than the default backup job
# retention time (180 days). Entries older than this are evicted on read.
FRESH = 15465600

# Backend kinds accepted by Cache / create_storage
STORAGE_SQLITE = "sqlite"
STORAGE_DIRECTORY = "directory"
STORAGE_RAM = "ram"
DEFAULT_STORAGE_KIND = STORAGE_SQLITE

# SQLite backend
DB_TABLE = "key_value"
DB_COLUMNS = ("key", "value", "timestamp")
DB_TIMEOUT = 30.0  # Seconds a writer waits on another connection's lock

# Directory backend
CACHE_FILE = "cache"  # Value file inside each key directory

# Environment variables read by the CLI
ENV_STORAGE_DETAILS = "PCACHE_STORAGE_DETAILS"
ENV_STORAGE = "PCACHE_STORAGE"
ENV_FRESH = "PCACHE_FRESH"
ENV_ENCODING = "PCACHE_ENCODING"

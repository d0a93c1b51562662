"""Core constants: cache key prefixes and shared literal values."""

# Delimiter for composite cache keys (session:<uid>:<name>)
CACHE_KEY_SEP = ":"

# Tracing span names for the three deletion stages
SPAN_VERIFY_CREDENTIAL = "account_deletion.verify_credential"
SPAN_PURGE_DATA = "account_deletion.purge_data"
SPAN_FINALIZE = "account_deletion.finalize"

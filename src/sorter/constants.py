"""Constants for the playcount sort pipeline."""

# Minimum spacing between outbound lookups (5 requests per second)
DEFAULT_MIN_INTERVAL_SECONDS = 0.2

# Extended pause inserted after every N lookups
DEFAULT_COOLDOWN_EVERY = 100
DEFAULT_COOLDOWN_SECONDS = 10.0

# Component names for structured logging
COMPONENT_PIPELINE = "pipeline"
COMPONENT_RATE_LIMITER = "rate_limiter"
COMPONENT_POPULARITY = "popularity"

"""Constants for the fetch layer."""

# Poll interval while waiting on a request the caller may cancel
CANCEL_POLL_INTERVAL_SECONDS = 0.05

# Chunk size for streaming reads
STREAM_CHUNK_SIZE = 4096

# Name given to request worker threads
WORKER_THREAD_NAME = "http-fetch"

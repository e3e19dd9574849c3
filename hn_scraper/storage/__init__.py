"""Storage backends: the thread cache and the JSON output sink."""

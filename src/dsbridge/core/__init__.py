"""Core building blocks: errors, configuration, cache, and rule IR."""

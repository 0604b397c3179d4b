"""Mix-aid card index: Redis-backed card storage with set-based search."""

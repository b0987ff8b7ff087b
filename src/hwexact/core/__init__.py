"""Core data structures and statistics for hwexact."""

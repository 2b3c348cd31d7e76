"""Reference block synchronization."""

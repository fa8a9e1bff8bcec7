"""Core plumbing: configuration, error types, logging."""

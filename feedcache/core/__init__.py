"""Registry, cache store and refresh engine."""

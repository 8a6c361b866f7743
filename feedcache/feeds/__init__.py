"""Feed identifiers and RSS/Atom parsing."""

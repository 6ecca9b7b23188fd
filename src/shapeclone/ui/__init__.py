"""Command-line surface: argument routing and plain-text rendering."""

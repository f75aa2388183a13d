"""Git access layer: commit graph reads and notes storage."""

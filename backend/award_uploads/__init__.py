"""Award image uploads backend."""

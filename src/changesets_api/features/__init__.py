"""Feature modules for the changesets API."""

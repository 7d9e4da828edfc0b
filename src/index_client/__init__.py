"""Client-side bookmark search index kept in sync with the HiveCache API."""

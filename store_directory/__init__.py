"""Store Directory API."""

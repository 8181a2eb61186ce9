"""Property intelligence: analysis over normalized records."""

"""Models that exist only to exercise the generic unit of work."""

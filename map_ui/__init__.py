"""Terminal interface for the tactical map."""

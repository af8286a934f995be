"""Services for buildkeeper."""

"""Services for UpdatePilot."""

"""UpdatePilot: keeps plugins and themes in step with their GitHub/GitLab repositories."""

__version__ = "0.1.0"

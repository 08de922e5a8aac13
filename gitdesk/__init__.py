"""gitdesk - diff, hunk staging and classified git operations for a desktop Git client."""

__version__ = "0.1.0"

"""Building blocks for a chat application: errors, contacts, message content,
file credentials, SQLite activity tracking and binary wire packets."""

__version__ = "0.1.0"
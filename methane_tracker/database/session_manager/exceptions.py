"""
Database exceptions.
"""


class DatabaseNotInitialized(Exception):
    """Raised when a session is requested before Database.init()."""
    pass

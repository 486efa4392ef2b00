class PersistenceError(Exception):
    """Raised when a translation cannot be written to or read from the database."""

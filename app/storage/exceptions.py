class ImageStoreError(Exception):
    """Raised when a page image path is invalid or cannot be written."""

class PdfRasterizationError(Exception):
    """Raised when a PDF cannot be opened or read as a whole."""

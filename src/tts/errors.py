class TTSError(Exception):
    """Raised when a prompt cannot be synthesized or played."""

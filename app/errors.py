"""Engine-level exceptions."""


class ExportError(Exception):
    """Report could not be produced. ``message`` is safe to show to a counselor."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RosterError(ValueError):
    """Uploaded roster file is unreadable or missing required columns."""

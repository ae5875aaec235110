"""Exception types raised by the MIDI registry merge pipeline."""


class MidiRegistryError(Exception):
    """Base class for all merge pipeline errors."""


class ConfigurationError(MidiRegistryError):
    """Alias configuration is missing or malformed.

    Callers are expected to absorb this and continue with an empty alias table.
    """


class InputParseError(MidiRegistryError):
    """A source database is not well-formed. Aborts the run before any output."""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path

    def __str__(self):
        base = super().__str__()
        if self.path:
            return f"{base} ({self.path})"
        return base

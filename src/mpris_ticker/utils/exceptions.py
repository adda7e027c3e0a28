"""
Custom exceptions for the status line ticker.

Defines the exceptions raised while compiling format strings, loading
configuration and talking to the player backend, for clearer error handling.
"""

class TickerException(Exception):
    """
    Base exception for every ticker error.

    Attributes:
        message (str): Detailed error message
        code (int): Optional error code
    """
    def __init__(self, message: str, code: int = None):
        self.message = message
        self.code = code
        super().__init__(self.message)

class FormatError(TickerException):
    """
    Raised when a display or metadata format string cannot be compiled.

    Attributes:
        position (int): Character offset in the source where the error was found
        source (str): The format string being compiled
    """
    def __init__(self, message: str, position: int = None, source: str = None):
        self.position = position
        self.source = source
        if position is not None:
            message = f"at {position}: {message}"
        super().__init__(message)

class UnterminatedBlock(FormatError):
    """
    An opening '[' without a matching ']'.

    Examples:
        >>> raise UnterminatedBlock(0, "[metadata")
    """
    def __init__(self, position: int, source: str = None):
        super().__init__("unterminated block, expected ']'", position, source)

class UnterminatedOptional(FormatError):
    """An opening '<' without a matching '>'."""
    def __init__(self, position: int, source: str = None):
        super().__init__("unterminated optional section, expected '>'", position, source)

class UnexpectedCharacter(FormatError):
    """A closing ']' or '>' with nothing open."""
    def __init__(self, char: str, position: int, source: str = None):
        self.char = char
        super().__init__(f"unexpected '{char}'", position, source)

class UnknownBlockKind(FormatError):
    """A block name that is not valid in the current format mode."""
    def __init__(self, name: str, position: int = None, source: str = None):
        self.name = name
        super().__init__(f"unknown block '{name}'", position, source)

class ArgumentCountError(FormatError):
    """A block was given more arguments than it accepts."""
    def __init__(self, name: str, expected: int, got: int, position: int = None, source: str = None):
        self.name = name
        self.expected = expected
        self.got = got
        super().__init__(
            f"expected at most {expected} arguments for block '{name}', got {got}",
            position, source
        )

class MissingMandatoryMetadataBlock(FormatError):
    """A display format without any [metadata] block."""
    def __init__(self, source: str = None):
        super().__init__("display format has no metadata block", None, source)

class DuplicateMetadataBlock(FormatError):
    """A display format with more than one [metadata] block."""
    def __init__(self, position: int, source: str = None):
        super().__init__("display format has more than one metadata block", position, source)

class ConfigError(TickerException):
    """
    Raised for invalid configuration values.

    Examples:
        >>> raise ConfigError("refresh_ticks must be at least 1")
    """
    pass

class BackendError(TickerException):
    """Raised when the player backend cannot be queried at all."""
    pass

class InstanceAlreadyRunning(TickerException):
    """Raised when another ticker already owns the command channel."""
    pass

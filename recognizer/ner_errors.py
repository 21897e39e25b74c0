"""
Error taxonomy for the trie-based named entity recognizer.

User errors (bad grammar, bad options, unreadable grammar source) are raised
before any scanning starts. InternalConsistencyError signals a defect in the
dictionary walk or the acceptance policy and is never caused by input text.
"""


class RecognizerError(Exception):
    """Base class for all recognizer errors."""


class GrammarSyntaxError(RecognizerError, ValueError):
    """A grammar line is not a valid entity rule."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(
            f"Bad grammar syntax in line {line_number}: {line}\n\t{reason}"
        )


class ConfigurationError(RecognizerError, ValueError):
    """Unknown option, wrongly typed option value or malformed match template."""


class GrammarIOError(RecognizerError, OSError):
    """The grammar source could not be read."""


class InternalConsistencyError(RecognizerError, RuntimeError):
    """The scan reached a state that only a dictionary or policy bug can cause."""

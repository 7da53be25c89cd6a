# tradedocs/domain/errors.py

from typing import Optional


class ValidationError(ValueError):
    """
    Raised when a line operation is called on a line that does not meet
    its preconditions. Nothing is changed when this is raised.
    """

    def __init__(self, message: str, line_id: Optional[str] = None):
        super().__init__(message)
        self.line_id = line_id

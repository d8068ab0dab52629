"""
Application error types.
"""


class DatabaseError(Exception):
    """
    Raised when a catalog query fails at the database layer.

    Wraps connection failures, pool timeouts, malformed SQL and column
    type mismatches. Carries the statement and parameters that were being
    executed so the request boundary can log them.
    """

    def __init__(self, message, query=None, params=None):
        super().__init__(message)
        self.message = message
        self.query = query
        self.params = list(params) if params is not None else []

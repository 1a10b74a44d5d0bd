"""
Error taxonomy shared by the query service and the HTTP layer.
"""


class DashboardError(Exception):
    """Base class for errors reported to API clients"""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgumentError(DashboardError):
    """Malformed request parameter"""

    status_code = 400


class NotFoundError(DashboardError):
    """No row matches the requested key"""

    status_code = 404


class InternalError(DashboardError):
    """Store or I/O failure; the message is generic, detail goes to the log"""

    status_code = 500

# reliefhub/errors.py
"""Domain errors raised by the workflow services.

Routers never build HTTP errors themselves for these cases; the handlers
installed in ``reliefhub.main`` turn them into redirects, flash messages
or error pages.
"""


class ReliefError(Exception):
    message = "Request could not be completed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationFailed(ReliefError):
    message = "Please correct the highlighted fields."

    def __init__(self, errors: dict[str, str], message: str | None = None):
        super().__init__(message)
        self.errors = errors


class NotAuthenticated(ReliefError):
    message = "Please log in to continue."


class Forbidden(ReliefError):
    message = "You are not allowed to do that."


class NotFound(ReliefError):
    message = "The requested item was not found."


class DuplicateEmail(ReliefError):
    message = "Email already exists."


class InvalidCredentials(ReliefError):
    message = "Invalid login attempt."


class AlreadyAssigned(ReliefError):
    message = "You are already assigned to this task."


class TaskFull(ReliefError):
    message = "This task is already full."

"""Error kinds surfaced by the classroom API.

Every error carries the HTTP status it maps to and the message that is safe
to show a caller. Internal details (store exceptions, misconfiguration
specifics) go to the log, never into ``message``.
"""


class ClassroomAPIError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ServiceMisconfigured(ClassroomAPIError):
    status_code = 500
    message = "Service authentication not configured"


class MissingCredential(ClassroomAPIError):
    status_code = 401
    message = "Bearer token is required"


class InvalidCredential(ClassroomAPIError):
    status_code = 401
    message = "Invalid bearer token"


class InvalidInput(ClassroomAPIError):
    status_code = 400
    message = "Invalid request"


class StoreUnavailable(ClassroomAPIError):
    status_code = 500
    message = "Failed to access user store"

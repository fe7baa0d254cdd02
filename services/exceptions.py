"""
Service Exceptions
Domain errors raised by the service layer and translated by the API routers
"""


class MedTrackError(Exception):
    """Base class for service-layer errors"""


class NotFoundError(MedTrackError, LookupError):
    """Record does not exist or is not owned by the caller"""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class DuplicateEmailError(MedTrackError, ValueError):
    """Signup with an email that is already registered"""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already exists")


class InvalidCredentialsError(MedTrackError):
    """Login with an unknown email or wrong password"""

    def __init__(self):
        super().__init__("Invalid credentials")


class InvalidTokenError(MedTrackError):
    """Bearer token could not be verified"""


class AssistantUnavailableError(MedTrackError):
    """Language assistant is not configured or the upstream call failed"""


class AssistantResponseError(MedTrackError):
    """Language assistant answered with something we could not use"""

class DonationPlatformError(Exception):
    """Base class for failures the API reports back to the client."""

    status_code = 500

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class ValidationFailed(DonationPlatformError):
    """Raised when a payload is incomplete or breaks a business rule. Nothing is written."""

    status_code = 400


class NotFound(DonationPlatformError):
    """Raised when a campaign, donation or user id cannot be resolved."""

    status_code = 404

    def __init__(self, kind, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found")


class AccessDenied(DonationPlatformError):
    """Raised when the caller is neither the owner nor an admin."""

    status_code = 403

"""
Purpose:
- Exception types the gateway maps to HTTP statuses.
- PayloadError -> 400, ProviderError -> 500, MissingApiKey -> 500 before any provider call.
"""

MISSING_API_KEY_MESSAGE = "API_KEY environment variable not set on the server"
INVALID_ACTION_MESSAGE = "Invalid action specified"
UNKNOWN_SERVER_ERROR = "An unknown error occurred on the server."

class GatewayError(Exception):
    status_code = 500

class PayloadError(GatewayError):
    status_code = 400

class ProviderError(GatewayError):
    """
    Anything that went wrong talking to the provider or reading its answer.
    The message is returned to the caller, so it must never carry credentials.
    """
    status_code = 500

class MissingApiKey(GatewayError):
    status_code = 500

    def __init__(self, message: str = MISSING_API_KEY_MESSAGE):
        super().__init__(message)

# arrivals/errors.py
"""
Error taxonomy shared by the server routes and the polling clients.
Each kind carries the HTTP status it is surfaced as.
"""


class ArrivalsError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ArrivalsError):
    """Missing or malformed input. Never retried automatically."""
    status_code = 400


class UpstreamUnavailable(ArrivalsError):
    """Network failure, timeout, or rate limit talking to the check-in directory."""
    status_code = 503


class UpstreamAuthExpired(ArrivalsError):
    """Upstream rejected our credentials (or the caller's session) — forces re-login."""
    status_code = 401

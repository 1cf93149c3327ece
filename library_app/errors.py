"""
Service-layer exceptions.

They subclass ValueError so controllers that only know about ValueError still
turn them into a 400 instead of a 500. ``status_code`` is what the HTTP layer
sends back.
"""


class ServiceError(ValueError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    # "already checked out" style rule violations; reported as 400
    status_code = 400


class ValidationError(ServiceError):
    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401

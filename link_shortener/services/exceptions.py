"""Exceptions for the link shortener service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    pass


class LinkError(ServiceError):
    """Base exception for link-related errors."""
    pass


class InvalidURLError(LinkError):
    """The URL is not an absolute http(s) URL after normalization."""
    pass


class InvalidAliasError(LinkError):
    """The requested alias has the wrong length or characters."""
    pass


class AliasConflictError(LinkError):
    """The requested alias is already in use."""
    pass


class ShortCodeExhaustedError(LinkError):
    """No free short code was found within the attempt budget."""
    pass


class LinkNotFoundError(LinkError):
    """No link matches the given id or short code."""
    pass


class LinkAccessDeniedError(LinkError):
    """The link belongs to another user."""
    pass


class AuthError(ServiceError):
    """Base exception for authentication errors."""
    pass


class UserAlreadyExistsError(AuthError):
    """The email or username is already registered."""
    pass


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password."""
    pass


class InvalidTokenError(AuthError):
    """The access token is malformed, expired or names an unknown user."""
    pass

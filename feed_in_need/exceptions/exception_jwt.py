"""Exception handlers for JWT and credential errors."""
# pylint: disable=too-few-public-methods


class JWTError( Exception ):
    """Base class for the authentication exceptions."""


class JWTRequestError( JWTError ):
    """Exception to handle the case where the JWT identity does not resolve to a user."""

    def __init__( self ):
        super().__init__()
        self.message = 'Not authorized to access this route.'


class InvalidCredentialsError( JWTError ):
    """Exception for a login with an unknown email or a wrong password."""

    def __init__( self ):
        super().__init__()
        self.message = 'Invalid email or password.'


class IncorrectPasswordError( JWTError ):
    """Exception for a password change with the wrong current password."""

    def __init__( self ):
        super().__init__()
        self.message = 'Current password is incorrect.'

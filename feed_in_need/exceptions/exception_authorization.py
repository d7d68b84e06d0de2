"""Exception handlers for role and ownership errors."""
# pylint: disable=too-few-public-methods


class AuthorizationError( Exception ):
    """Base class for the role and ownership exceptions."""

    def __init__( self, message=None ):
        super().__init__()
        self.message = message or 'Not authorized.'


class RoleNotAuthorizedError( AuthorizationError ):
    """Exception for a role that may not use the endpoint."""

    def __init__( self, role ):
        super().__init__( "Role '{}' is not authorized to access this route.".format( role ) )


class SuperAdminRequiredError( AuthorizationError ):
    """Exception for an action only the superadmin may take."""

    def __init__( self ):
        super().__init__( 'Only superadmin can perform this action.' )


class ReceiverNotVerifiedError( AuthorizationError ):
    """Exception for a receiver whose account is not yet approved by an admin."""

    def __init__( self ):
        super().__init__( 'Your account is pending verification. Please wait for admin approval.' )


class EmailNotVerifiedError( AuthorizationError ):
    """Exception for a login before the email address is verified."""

    def __init__( self ):
        super().__init__( 'Please verify your email address before logging in.' )


class NotDonationOwnerError( AuthorizationError ):
    """Exception for acting on a donation the caller does not own."""

    def __init__( self, action='update' ):
        super().__init__( 'Not authorized to {} this donation.'.format( action ) )


class DonationEditForbiddenError( AuthorizationError ):
    """Exception for an edit blocked by the donation's status or approval."""


class NotRequestReceiverError( AuthorizationError ):
    """Exception for acting on a request made by somebody else."""

    def __init__( self, message=None ):
        super().__init__( message or 'Not authorized to access this request.' )


class NotRequestDonorError( AuthorizationError ):
    """Exception for a pickup QR lookup by somebody other than the donor."""

    def __init__( self ):
        super().__init__( 'Only the donor can view pickup QR code.' )


class NotTransactionParticipantError( AuthorizationError ):
    """Exception for a rating by somebody who is neither the donor nor the receiver."""

    def __init__( self ):
        super().__init__( 'You are not authorized to rate this transaction.' )


class ProtectedUserError( AuthorizationError ):
    """Exception for deleting a superadmin, or an admin by a non superadmin."""


class ReverificationNotAllowedError( AuthorizationError ):
    """Exception for a re-verification request from an admin account."""

    def __init__( self ):
        super().__init__( 'Only receivers and donors can request re-verification.' )

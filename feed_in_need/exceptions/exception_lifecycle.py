"""Exception handlers for operations that are invalid for the current state of an entity."""
# pylint: disable=too-few-public-methods


class LifecycleError( Exception ):
    """Base class for the state conflict exceptions."""

    def __init__( self, message ):
        super().__init__()
        self.message = message


class InvalidStateTransitionError( LifecycleError ):
    """Exception for a status change that is not in the transition table."""

    def __init__( self, entity, from_status, to_status ):
        super().__init__(
            'Cannot move {} from {} to {}.'.format( entity, from_status, to_status )
        )
        self.entity = entity
        self.from_status = from_status
        self.to_status = to_status


class DonationNotAvailableError( LifecycleError ):
    """Exception for requesting a donation that is no longer available."""

    def __init__( self, status ):
        super().__init__( 'This donation is no longer available (status: {}).'.format( status ) )


class DonationExpiredError( LifecycleError ):
    """Exception for requesting a donation past its expiry."""

    def __init__( self ):
        super().__init__( 'This donation has expired.' )


class DuplicateRequestError( LifecycleError ):
    """Exception for a second request on the same donation by the same receiver."""

    def __init__( self ):
        super().__init__( 'You have already requested this donation.' )


class RequestNotPendingError( LifecycleError ):
    """Exception for reviewing or cancelling a request that is not pending."""

    def __init__( self, status, action='process' ):
        super().__init__( 'Can only {} pending requests (status: {}).'.format( action, status ) )


class RequestNotApprovedError( LifecycleError ):
    """Exception for completing a request that is not approved."""

    def __init__( self, status, action='complete' ):
        super().__init__( 'Can only {} approved requests (status: {}).'.format( action, status ) )


class RequestNotCompletedError( LifecycleError ):
    """Exception for rating a transaction that is not completed."""

    def __init__( self, status ):
        super().__init__( 'Can only rate completed transactions (status: {}).'.format( status ) )


class RatingAlreadySubmittedError( LifecycleError ):
    """Exception for a second rating in the same direction."""

    def __init__( self, rated_role=None ):
        if rated_role:
            super().__init__( 'You have already rated this {}.'.format( rated_role ) )
        else:
            super().__init__( 'You have already rated this transaction.' )


class UserAlreadyTrustedError( LifecycleError ):
    """Exception for granting the trusted badge twice."""

    def __init__( self ):
        super().__init__( 'User already has the trusted badge.' )


class UserNotTrustedError( LifecycleError ):
    """Exception for revoking a trusted badge the user does not have."""

    def __init__( self ):
        super().__init__( 'User does not have the trusted badge.' )


class UserAlreadyExistsError( LifecycleError ):
    """Exception for registering an email address twice."""

    def __init__( self ):
        super().__init__( 'User with this email already exists.' )


class UserRoleMismatchError( LifecycleError ):
    """Exception for an admin action aimed at a user of the wrong role."""

    def __init__( self, expected_role ):
        super().__init__( 'User is not a {}.'.format( expected_role ) )

"""Exception handlers for the models: lookups that found nothing."""
# pylint: disable=too-few-public-methods


class ModelError( Exception ):
    """Base class for the not found exceptions on the models."""


class ModelUserNotFoundError( ModelError ):
    """Exception for a user lookup with no result."""

    def __init__( self ):
        super().__init__()
        self.message = 'User not found.'


class ModelDonationNotFoundError( ModelError ):
    """Exception for a donation lookup with no result, or a donation hidden from the caller."""

    def __init__( self ):
        super().__init__()
        self.message = 'Donation not found.'


class ModelRequestNotFoundError( ModelError ):
    """Exception for a request lookup with no result."""

    def __init__( self, message=None ):
        super().__init__()
        self.message = message or 'Request not found.'


class ModelApprovedRequestNotFoundError( ModelError ):
    """Exception for a donation that has no approved request."""

    def __init__( self ):
        super().__init__()
        self.message = 'No approved request found for this donation.'


class ModelCertificateNotFoundError( ModelError ):
    """Exception for a certificate lookup with no result."""

    def __init__( self ):
        super().__init__()
        self.message = 'Certificate not found.'


class ModelNotificationNotFoundError( ModelError ):
    """Exception for a notification lookup with no result."""

    def __init__( self ):
        super().__init__()
        self.message = 'Notification not found.'


class ModelMessageNotFoundError( ModelError ):
    """Exception for an inbox message lookup with no result."""

    def __init__( self ):
        super().__init__()
        self.message = 'Message not found.'

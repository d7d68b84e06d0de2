"""Exception handlers for missing or malformed input."""
# pylint: disable=too-few-public-methods


class ValidationFailedError( Exception ):
    """Base class for the input validation exceptions."""

    def __init__( self, message ):
        super().__init__()
        self.message = message


class DonationPhotosError( ValidationFailedError ):
    """Exception for a donation with no photos, or more than allowed."""

    def __init__( self ):
        super().__init__( 'Please upload at least 1 food photo (max 3).' )


class InvalidCoordinatesError( ValidationFailedError ):
    """Exception for a latitude or longitude that does not parse or is out of range."""

    def __init__( self ):
        super().__init__( 'Invalid location coordinates.' )


class InvalidExpiryError( ValidationFailedError ):
    """Exception for an expiry that does not resolve to a date."""

    def __init__( self ):
        super().__init__( 'Expiry date/time must be a valid date.' )


class RequestMessageTooShortError( ValidationFailedError ):
    """Exception for an untrusted receiver who did not explain the need."""

    def __init__( self, minimum ):
        super().__init__(
            'Please explain why you need this food and who will benefit from it '
            '(minimum {} characters).'.format( minimum )
        )


class ConfirmationCodeRequiredError( ValidationFailedError ):
    """Exception for a completion with no confirmation code."""

    def __init__( self ):
        super().__init__( 'Confirmation code is required.' )


class ConfirmationCodeInvalidError( ValidationFailedError ):
    """Exception for a confirmation code that does not match the request."""

    def __init__( self, message=None ):
        super().__init__( message or 'Invalid confirmation code. Please get the correct code from the donor.' )


class QRCodeInvalidError( ValidationFailedError ):
    """Exception for a QR payload that does not parse or is not a pickup payload."""

    def __init__( self, message=None ):
        super().__init__( message or 'Invalid QR code. Please scan the correct pickup QR code.' )


class ReasonRequiredError( ValidationFailedError ):
    """Exception for a rejection or trust removal without a sufficient reason."""


class InvalidEmailVerificationCodeError( ValidationFailedError ):
    """Exception for a wrong or expired email verification code."""

    def __init__( self ):
        super().__init__( 'Invalid or expired verification code.' )


class EmailAlreadyVerifiedError( ValidationFailedError ):
    """Exception for asking a new verification code for an address that is already verified."""

    def __init__( self ):
        super().__init__( 'Email already verified.' )


class AccountAlreadyVerifiedError( ValidationFailedError ):
    """Exception for a re-verification request from an approved account."""

    def __init__( self ):
        super().__init__( 'Your account is already verified.' )

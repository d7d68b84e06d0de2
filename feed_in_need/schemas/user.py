"""Marshmallow schema module for UserModel and the account payloads."""
# pylint: disable=too-few-public-methods
from marshmallow import EXCLUDE
from marshmallow import Schema
from marshmallow import fields
from marshmallow import validate

from feed_in_need.flask_essentials import database
from feed_in_need.flask_essentials import marshmallow
from feed_in_need.models.user import UserModel

PRIVATE_USER_FIELDS = ( 'password_hash', 'email_verification_code', 'email_verification_expires' )


class UserSchema( marshmallow.SQLAlchemyAutoSchema ):
    """Marshmallow schema for serialization/deserialization of UserModel."""

    class Meta:
        """Meta object for Marshmallow schema."""

        model = UserModel
        load_instance = True
        sqla_session = database.session
        exclude = PRIVATE_USER_FIELDS


class UserSummarySchema( Schema ):
    """The public face of a user when nested in another payload."""

    id = fields.Integer()
    name = fields.String()
    email = fields.String()
    phone = fields.String()
    role = fields.String()
    receiver_type = fields.String()
    is_trusted = fields.Boolean()
    average_rating = fields.Float()


class RegisterPayloadSchema( Schema ):
    """Payload for self registration of donors and receivers."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    name = fields.String( required=True, validate=validate.Length( min=1, max=100 ) )
    email = fields.Email( required=True )
    password = fields.String( required=True, load_only=True, validate=validate.Length( min=6 ) )
    phone = fields.String( load_default=None )
    role = fields.String( load_default='donor', validate=validate.OneOf( [ 'donor', 'receiver' ] ) )
    donor_type = fields.String( load_default=None, validate=validate.OneOf( [ 'individual', 'hotel' ] ) )
    receiver_type = fields.String(
        load_default=None, validate=validate.OneOf( [ 'individual', 'organization' ] )
    )
    address = fields.String( load_default=None )


class AdminPayloadSchema( Schema ):
    """Payload for the superadmin creating an admin."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    name = fields.String( required=True, validate=validate.Length( min=1, max=100 ) )
    email = fields.Email( required=True )
    password = fields.String( required=True, load_only=True, validate=validate.Length( min=6 ) )
    phone = fields.String( load_default=None )


class LoginPayloadSchema( Schema ):
    """Payload for login."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    email = fields.Email( required=True )
    password = fields.String( required=True, load_only=True )


class VerifyEmailPayloadSchema( Schema ):
    """Payload for confirming the emailed verification code."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    email = fields.Email( required=True )
    code = fields.String( required=True )


class ResendVerificationPayloadSchema( Schema ):
    """Payload for asking a fresh email verification code."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    email = fields.Email( required=True )


class ProfilePayloadSchema( Schema ):
    """Payload for the caller editing their own profile. Absent fields are left as they are."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    name = fields.String( validate=validate.Length( min=1, max=100 ) )
    phone = fields.String( allow_none=True, validate=validate.Length( max=32 ) )
    address = fields.String( allow_none=True, validate=validate.Length( max=255 ) )


class ChangePasswordPayloadSchema( Schema ):
    """Payload for the caller changing their password."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    current_password = fields.String( required=True, load_only=True )
    new_password = fields.String( required=True, load_only=True, validate=validate.Length( min=6 ) )


class VerifyUserPayloadSchema( Schema ):
    """Payload for an admin approving or rejecting a donor or receiver."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    status = fields.String( required=True, validate=validate.OneOf( [ 'approved', 'rejected' ] ) )
    rejection_reason = fields.String( load_default=None )


class TrustRevokePayloadSchema( Schema ):
    """Payload for an admin removing a trusted badge."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    reason = fields.String( load_default='' )

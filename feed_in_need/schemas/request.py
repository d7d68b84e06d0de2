"""Marshmallow schema module for RequestModel and the request payloads."""
# pylint: disable=too-few-public-methods
from marshmallow import EXCLUDE
from marshmallow import Schema
from marshmallow import fields
from marshmallow import validate

from feed_in_need.flask_essentials import database
from feed_in_need.flask_essentials import marshmallow
from feed_in_need.models.request import RequestModel
from feed_in_need.schemas.donation import DonationSchema
from feed_in_need.schemas.user import UserSummarySchema

PICKUP_CREDENTIAL_FIELDS = ( 'confirmation_code', 'qr_code_data' )


class RequestSchema( marshmallow.SQLAlchemyAutoSchema ):
    """Marshmallow schema for serialization/deserialization of RequestModel.

    The receiver never sees the pickup credentials: instantiate with exclude=PICKUP_CREDENTIAL_FIELDS for receiver
    facing payloads. The donor reads them through the approved request of the donation.
    """

    receiver = fields.Nested(
        UserSummarySchema,
        only=( 'id', 'name', 'email', 'phone', 'receiver_type', 'is_trusted', 'average_rating' ),
        dump_only=True
    )
    donation = fields.Nested(
        DonationSchema,
        only=( 'id', 'food_title', 'quantity', 'address', 'status', 'expiry_date_time', 'donor' ),
        dump_only=True
    )

    class Meta:
        """Meta object for Marshmallow schema."""

        model = RequestModel
        load_instance = True
        sqla_session = database.session


class RequestPayloadSchema( Schema ):
    """Payload for a receiver requesting a donation."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    donation_id = fields.Integer( required=True )
    message = fields.String( load_default='', allow_none=True, validate=validate.Length( max=500 ) )
    servings_needed = fields.Integer( load_default=None, allow_none=True, validate=validate.Range( min=1 ) )


class RequestReviewPayloadSchema( Schema ):
    """Payload for an admin approving or rejecting a pending request."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    status = fields.String( required=True, validate=validate.OneOf( [ 'approved', 'rejected' ] ) )
    review_notes = fields.String( load_default=None, allow_none=True )


class CompletionPayloadSchema( Schema ):
    """Payload for the three pickup completion paths: confirmation code, QR payload, or code only."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    confirmation_code = fields.String( load_default=None, allow_none=True )
    qr_data = fields.String( load_default=None, allow_none=True )

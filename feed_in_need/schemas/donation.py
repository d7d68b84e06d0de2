"""Marshmallow schema module for DonationModel and the donation payloads."""
# pylint: disable=too-few-public-methods
from marshmallow import EXCLUDE
from marshmallow import Schema
from marshmallow import fields
from marshmallow import validate

from feed_in_need.flask_essentials import database
from feed_in_need.flask_essentials import marshmallow
from feed_in_need.models.donation import DonationModel
from feed_in_need.models.donation import STORAGE_CONDITIONS
from feed_in_need.schemas.user import UserSummarySchema


class DonationSchema( marshmallow.SQLAlchemyAutoSchema ):
    """Marshmallow schema for serialization/deserialization of DonationModel."""

    donor = fields.Nested( UserSummarySchema, only=( 'id', 'name', 'email', 'is_trusted' ), dump_only=True )
    claimed_by = fields.Nested( UserSummarySchema, only=( 'id', 'name', 'email', 'phone' ), dump_only=True )
    time_remaining = fields.String( dump_only=True )

    class Meta:
        """Meta object for Marshmallow schema."""

        model = DonationModel
        load_instance = True
        sqla_session = database.session


class DonationPayloadSchema( Schema ):
    """Payload for creating or updating a donation.

    Photos, expiry and coordinates are passed through untouched and checked by helpers.validation so that each has
    its own error message.
    """

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    donor_phone = fields.String( required=True, validate=validate.Length( min=1, max=32 ) )
    food_title = fields.String( required=True, validate=validate.Length( min=1, max=200 ) )
    food_description = fields.String( required=True, validate=validate.Length( min=1, max=1000 ) )
    quantity = fields.String( required=True, validate=validate.Length( min=1, max=100 ) )
    storage_condition = fields.String( validate=validate.OneOf( STORAGE_CONDITIONS ) )
    food_photos = fields.Raw()
    expiry_date_time = fields.Raw( required=True )
    latitude = fields.Raw( required=True )
    longitude = fields.Raw( required=True )
    address = fields.String( required=True, validate=validate.Length( min=1, max=255 ) )
    notes = fields.String( allow_none=True )


class DonationApprovalPayloadSchema( Schema ):
    """Payload for an admin approving or rejecting a donation."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    approved = fields.Boolean( required=True, truthy={ True }, falsy={ False } )

"""Marshmallow schema module for RatingModel and the rating payload."""
# pylint: disable=too-few-public-methods
from marshmallow import EXCLUDE
from marshmallow import Schema
from marshmallow import fields
from marshmallow import validate

from feed_in_need.flask_essentials import database
from feed_in_need.flask_essentials import marshmallow
from feed_in_need.models.rating import RatingModel
from feed_in_need.schemas.donation import DonationSchema
from feed_in_need.schemas.user import UserSummarySchema


class RatingSchema( marshmallow.SQLAlchemyAutoSchema ):
    """Marshmallow schema for serialization/deserialization of RatingModel."""

    rated_by = fields.Nested( UserSummarySchema, only=( 'id', 'name', 'role' ), dump_only=True )
    donation = fields.Nested( DonationSchema, only=( 'id', 'food_title' ), dump_only=True )

    class Meta:
        """Meta object for Marshmallow schema."""

        model = RatingModel
        load_instance = True
        sqla_session = database.session


class RatingPayloadSchema( Schema ):
    """Payload for rating the other party of a completed request."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    request_id = fields.Integer( required=True )
    rating = fields.Integer(
        required=True,
        strict=True,
        validate=validate.Range( min=1, max=5, error='Rating must be between 1 and 5.' )
    )
    feedback = fields.String( load_default='', allow_none=True, validate=validate.Length( max=500 ) )

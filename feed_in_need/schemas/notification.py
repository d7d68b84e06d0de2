"""Marshmallow schema module for NotificationModel, MessageModel and the admin message payload."""
# pylint: disable=too-few-public-methods
from marshmallow import EXCLUDE
from marshmallow import Schema
from marshmallow import fields
from marshmallow import validate

from feed_in_need.flask_essentials import database
from feed_in_need.flask_essentials import marshmallow
from feed_in_need.models.notification import MessageModel
from feed_in_need.models.notification import NotificationModel
from feed_in_need.schemas.user import UserSummarySchema


class NotificationSchema( marshmallow.SQLAlchemyAutoSchema ):
    """Marshmallow schema for serialization/deserialization of NotificationModel."""

    class Meta:
        """Meta object for Marshmallow schema."""

        model = NotificationModel
        load_instance = True
        sqla_session = database.session


class MessageSchema( marshmallow.SQLAlchemyAutoSchema ):
    """Marshmallow schema for serialization/deserialization of MessageModel."""

    sender = fields.Nested( UserSummarySchema, only=( 'id', 'name', 'email' ), dump_only=True )

    class Meta:
        """Meta object for Marshmallow schema."""

        model = MessageModel
        load_instance = True
        sqla_session = database.session


class MessagePayloadSchema( Schema ):
    """Payload for an admin sending an inbox message to a user."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    subject = fields.String( required=True, validate=validate.Length( min=1, max=255 ) )
    message = fields.String( required=True, validate=validate.Length( min=1 ) )
    action_required = fields.String( load_default=None, allow_none=True )

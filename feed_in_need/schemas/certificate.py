"""Marshmallow schema module for CertificateModel."""
# pylint: disable=too-few-public-methods
from marshmallow import EXCLUDE
from marshmallow import Schema
from marshmallow import fields

from feed_in_need.flask_essentials import database
from feed_in_need.flask_essentials import marshmallow
from feed_in_need.models.certificate import CertificateModel


class CertificateSchema( marshmallow.SQLAlchemyAutoSchema ):
    """Marshmallow schema for serialization/deserialization of CertificateModel."""

    class Meta:
        """Meta object for Marshmallow schema."""

        model = CertificateModel
        load_instance = True
        sqla_session = database.session


class CertificateImagePayloadSchema( Schema ):
    """Payload for attaching a rendered image URL to a certificate."""

    class Meta:
        """Meta object for Marshmallow schema."""

        unknown = EXCLUDE

    image_url = fields.Url( required=True )

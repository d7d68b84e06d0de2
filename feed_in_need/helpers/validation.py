"""Payload loading and the field checks that carry their own error messages."""
import math
from datetime import datetime
from datetime import timezone

from feed_in_need.exceptions.exception_validation import DonationPhotosError
from feed_in_need.exceptions.exception_validation import InvalidCoordinatesError
from feed_in_need.exceptions.exception_validation import InvalidExpiryError
from feed_in_need.exceptions.exception_validation import ReasonRequiredError

MAX_DONATION_PHOTOS = 3


def load_payload( schema, payload, partial=False ):
    """Validate a request body against a marshmallow schema.

    A marshmallow ValidationError propagates and is mapped to 400 by the application.

    :param Schema schema: An instance of the payload schema.
    :param dict payload: The JSON body, or None.
    :param bool partial: Whether required fields may be absent, e.g. for an update.
    :return: The validated dictionary.
    """

    return schema.load( payload or {}, partial=partial )


def validate_photos( photos ):
    """Between 1 and 3 non-empty photo URLs.

    :param photos: A list of URL strings, or a single URL string.
    :return: The list of URLs.
    """

    if isinstance( photos, str ):
        photos = [ photos ]
    if not isinstance( photos, list ):
        raise DonationPhotosError()

    photos = [ photo.strip() for photo in photos if isinstance( photo, str ) and photo.strip() ]
    if not photos or len( photos ) > MAX_DONATION_PHOTOS:
        raise DonationPhotosError()
    return photos


def parse_expiry( value ):
    """Resolve an ISO 8601 string or a datetime to a naive UTC datetime.

    :param value: '2024-06-01T18:00:00Z', '2024-06-01 18:00', a datetime, ...
    :return: datetime
    """

    if isinstance( value, datetime ):
        expiry = value
    elif isinstance( value, str ) and value.strip():
        text = value.strip()
        if text.endswith( 'Z' ):
            text = text[ :-1 ] + '+00:00'
        try:
            expiry = datetime.fromisoformat( text )
        except ValueError:
            raise InvalidExpiryError()
    else:
        raise InvalidExpiryError()

    if expiry.tzinfo is not None:
        expiry = expiry.astimezone( timezone.utc ).replace( tzinfo=None )
    return expiry


def parse_coordinates( latitude, longitude ):
    """Parse a latitude and longitude and check their ranges.

    :return: ( latitude, longitude ) as floats.
    """

    if isinstance( latitude, bool ) or isinstance( longitude, bool ):
        raise InvalidCoordinatesError()
    try:
        latitude = float( latitude )
        longitude = float( longitude )
    except ( TypeError, ValueError ):
        raise InvalidCoordinatesError()

    if math.isnan( latitude ) or math.isnan( longitude ):
        raise InvalidCoordinatesError()
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinatesError()
    return latitude, longitude


def require_reason( reason, minimum, message ):
    """A trimmed reason of at least minimum characters.

    :return: The trimmed reason.
    """

    reason = ( reason or '' ).strip()
    if len( reason ) < minimum:
        raise ReasonRequiredError( message )
    return reason

"""Pickup credentials: the confirmation code and the QR payload the receiver presents to the donor.

The confirmation code is 6 uppercase alphanumeric characters. The QR payload is a JSON string:

    { "type": "FEED_IN_NEED_PICKUP", "requestId": 7, "donationId": 3, "code": "K3Q9ZP", "timestamp": 1718000000000 }
"""
import hmac
import json
import secrets
import string
import time

from feed_in_need.exceptions.exception_validation import QRCodeInvalidError

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
QR_PAYLOAD_TYPE = 'FEED_IN_NEED_PICKUP'


def generate_confirmation_code():
    return ''.join( secrets.choice( CODE_ALPHABET ) for _ in range( CODE_LENGTH ) )


def build_qr_payload( request_id, donation_id, code, timestamp=None ):
    """Serialize the pickup payload for the QR code.

    :param int request_id: The request ID.
    :param int donation_id: The donation ID.
    :param str code: The confirmation code.
    :param int timestamp: Milliseconds since the epoch, defaults to now.
    :return: The JSON string.
    """

    if timestamp is None:
        timestamp = int( time.time() * 1000 )
    return json.dumps( {
        'type': QR_PAYLOAD_TYPE,
        'requestId': request_id,
        'donationId': donation_id,
        'code': code,
        'timestamp': timestamp
    } )


def parse_qr_payload( qr_data ):
    """Parse a scanned QR string back into its payload.

    :param str qr_data: The scanned string.
    :return: The payload dictionary.
    :raises QRCodeInvalidError: The string is not JSON, not a pickup payload, or misses a key.
    """

    try:
        payload = json.loads( qr_data )
    except ( TypeError, ValueError ):
        raise QRCodeInvalidError( 'Invalid QR code format.' )

    if not isinstance( payload, dict ) or payload.get( 'type' ) != QR_PAYLOAD_TYPE:
        raise QRCodeInvalidError()
    for key in ( 'requestId', 'code' ):
        if key not in payload:
            raise QRCodeInvalidError()

    return payload


def codes_match( presented, expected ):
    """Case-insensitive, constant time comparison of a presented code with the stored one."""

    if not presented or not expected:
        return False
    return hmac.compare_digest( str( presented ).strip().upper(), str( expected ).upper() )


def assign_pickup_credentials( request_model ):
    """Set a fresh confirmation code and QR payload on the request."""

    code = generate_confirmation_code()
    request_model.confirmation_code = code
    request_model.qr_code_data = build_qr_payload( request_model.id, request_model.donation_id, code )
    return code


def clear_pickup_credentials( request_model ):
    request_model.confirmation_code = None
    request_model.qr_code_data = None

"""Tests of the confirmation code and the pickup QR payload."""
import json
import unittest

from feed_in_need.exceptions.exception_validation import QRCodeInvalidError
from feed_in_need.helpers.pickup_credentials import CODE_ALPHABET
from feed_in_need.helpers.pickup_credentials import QR_PAYLOAD_TYPE
from feed_in_need.helpers.pickup_credentials import build_qr_payload
from feed_in_need.helpers.pickup_credentials import codes_match
from feed_in_need.helpers.pickup_credentials import generate_confirmation_code
from feed_in_need.helpers.pickup_credentials import parse_qr_payload


class PickupCredentialsTestCase( unittest.TestCase ):
    """python -m pytest tests/test_pickup_credentials.py"""

    def test_confirmation_code_format( self ):
        for _ in range( 50 ):
            code = generate_confirmation_code()
            self.assertEqual( len( code ), 6 )
            self.assertTrue( all( character in CODE_ALPHABET for character in code ) )
            self.assertEqual( code, code.upper() )

    def test_qr_payload_keys( self ):
        payload = json.loads( build_qr_payload( 7, 3, 'K3Q9ZP', timestamp=1718000000000 ) )
        self.assertEqual( payload, {
            'type': QR_PAYLOAD_TYPE,
            'requestId': 7,
            'donationId': 3,
            'code': 'K3Q9ZP',
            'timestamp': 1718000000000
        } )

    def test_qr_payload_default_timestamp_is_milliseconds( self ):
        payload = json.loads( build_qr_payload( 1, 1, 'AAAAAA' ) )
        self.assertGreater( payload[ 'timestamp' ], 10 ** 12 )

    def test_parse_qr_payload( self ):
        payload = parse_qr_payload( build_qr_payload( 7, 3, 'K3Q9ZP' ) )
        self.assertEqual( payload[ 'requestId' ], 7 )
        self.assertEqual( payload[ 'code' ], 'K3Q9ZP' )

    def test_parse_rejects_malformed_payloads( self ):
        with self.assertRaises( QRCodeInvalidError ) as context:
            parse_qr_payload( 'not json at all' )
        self.assertEqual( context.exception.message, 'Invalid QR code format.' )

        malformed = [
            json.dumps( [ 1, 2, 3 ] ),
            json.dumps( { 'type': 'SOMETHING_ELSE', 'requestId': 1, 'code': 'AAAAAA' } ),
            json.dumps( { 'type': QR_PAYLOAD_TYPE, 'code': 'AAAAAA' } ),
            json.dumps( { 'type': QR_PAYLOAD_TYPE, 'requestId': 1 } )
        ]
        for qr_data in malformed:
            with self.assertRaises( QRCodeInvalidError ):
                parse_qr_payload( qr_data )

    def test_codes_match_is_case_insensitive( self ):
        self.assertTrue( codes_match( 'k3q9zp', 'K3Q9ZP' ) )
        self.assertTrue( codes_match( ' K3Q9ZP ', 'K3Q9ZP' ) )
        self.assertFalse( codes_match( 'K3Q9ZQ', 'K3Q9ZP' ) )
        self.assertFalse( codes_match( '', 'K3Q9ZP' ) )
        self.assertFalse( codes_match( 'K3Q9ZP', None ) )

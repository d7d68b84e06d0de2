"""Tests of the three pickup completion paths and the certificate issued afterwards."""
import json

import mock

from feed_in_need.controllers.request import complete_by_code
from feed_in_need.controllers.request import complete_by_qr
from feed_in_need.controllers.request import complete_request
from feed_in_need.controllers.request import completion_summary
from feed_in_need.controllers.request import create_request
from feed_in_need.exceptions.exception_authorization import NotRequestReceiverError
from feed_in_need.exceptions.exception_lifecycle import RequestNotApprovedError
from feed_in_need.exceptions.exception_validation import ConfirmationCodeInvalidError
from feed_in_need.exceptions.exception_validation import ConfirmationCodeRequiredError
from feed_in_need.exceptions.exception_validation import QRCodeInvalidError
from feed_in_need.flask_essentials import database
from feed_in_need.models.certificate import CertificateModel
from feed_in_need.models.notification import NotificationModel
from tests.helpers.default_dictionaries import get_request_payload
from tests.helpers.feed_test_case import FeedTestCase
from tests.helpers.model_helpers import create_admin
from tests.helpers.model_helpers import create_approved_request
from tests.helpers.model_helpers import create_donation
from tests.helpers.model_helpers import create_donor
from tests.helpers.model_helpers import create_receiver


class CompletionTestCase( FeedTestCase ):
    """python -m pytest tests/test_completion.py"""

    def setUp( self ):
        super().setUp()
        self.donor = create_donor()
        self.receiver = create_receiver()
        self.other_receiver = create_receiver( email='other@example.org', name='Ashram Kitchen' )
        self.admin = create_admin()
        self.donation = create_donation( self.donor )
        self.request_model = create_approved_request( self.receiver, self.donation, self.admin )
        self.code = self.request_model.confirmation_code

    def assert_completed( self, request_model, certificate ):
        database.session.expire_all()
        self.assertEqual( request_model.status, 'completed' )
        self.assertIsNotNone( request_model.completed_at )
        self.assertEqual( self.donation.status, 'completed' )
        self.assertEqual( self.donation.claimed_by_id, self.receiver.id )
        self.assertEqual( self.donor.successful_donations, 1 )
        self.assertEqual( self.receiver.successful_receives, 1 )
        self.assertEqual( request_model.confirmation_code, self.code )

        self.assertEqual( certificate.donation_id, self.donation.id )
        self.assertEqual( certificate.donor_name, self.donor.name )
        self.assertEqual( certificate.receiver_name, self.receiver.name )
        self.assertEqual( len( certificate.certificate_id ), 12 )
        self.assertEqual( CertificateModel.query.count(), 1 )

    def test_complete_by_request_id( self ):
        request_model, certificate = complete_request(
            self.request_model.id, self.receiver, { 'confirmation_code': self.code.lower() }
        )
        self.assert_completed( request_model, certificate )

    def test_complete_by_qr( self ):
        request_model, certificate = complete_by_qr( self.receiver, { 'qr_data': self.request_model.qr_code_data } )
        self.assert_completed( request_model, certificate )

    def test_complete_by_code_alone( self ):
        request_model, certificate = complete_by_code(
            self.receiver, { 'confirmation_code': ' {} '.format( self.code ) }
        )
        self.assert_completed( request_model, certificate )

    def test_donor_is_told_about_the_certificate( self ):
        _, certificate = complete_request( self.request_model.id, self.receiver, { 'confirmation_code': self.code } )

        notification = NotificationModel.query.filter_by( user_id=self.donor.id, type='certificate' ).one()
        self.assertEqual( notification.link, '/share/certificate/{}'.format( certificate.certificate_id ) )

    def test_wrong_code( self ):
        with self.assertRaises( ConfirmationCodeRequiredError ):
            complete_request( self.request_model.id, self.receiver, { 'confirmation_code': '  ' } )
        with self.assertRaises( ConfirmationCodeInvalidError ):
            complete_request( self.request_model.id, self.receiver, { 'confirmation_code': 'XXXXXX' } )
        with self.assertRaises( ConfirmationCodeInvalidError ):
            complete_by_code( self.receiver, { 'confirmation_code': 'XXXXXX' } )

        database.session.expire_all()
        self.assertEqual( self.request_model.status, 'approved' )
        self.assertEqual( self.donor.successful_donations, 0 )

    def test_only_the_receiver_completes( self ):
        with self.assertRaises( NotRequestReceiverError ):
            complete_request( self.request_model.id, self.other_receiver, { 'confirmation_code': self.code } )
        with self.assertRaises( NotRequestReceiverError ):
            complete_by_qr( self.other_receiver, { 'qr_data': self.request_model.qr_code_data } )
        with self.assertRaises( ConfirmationCodeInvalidError ):
            complete_by_code( self.other_receiver, { 'confirmation_code': self.code } )

    def test_malformed_qr( self ):
        for qr_data in ( 'not json', json.dumps( { 'type': 'OTHER', 'requestId': 1, 'code': 'A' } ),
                         json.dumps( { 'type': 'FEED_IN_NEED_PICKUP', 'requestId': 'seven', 'code': 'A' } ) ):
            with self.assertRaises( QRCodeInvalidError ):
                complete_by_qr( self.receiver, { 'qr_data': qr_data } )
        with self.assertRaises( QRCodeInvalidError ):
            complete_by_qr( self.receiver, {} )

        tampered = json.loads( self.request_model.qr_code_data )
        tampered[ 'code' ] = 'ZZZZZZ'
        with self.assertRaises( ConfirmationCodeInvalidError ):
            complete_by_qr( self.receiver, { 'qr_data': json.dumps( tampered ) } )

    def test_completes_only_once( self ):
        complete_request( self.request_model.id, self.receiver, { 'confirmation_code': self.code } )
        with self.assertRaises( RequestNotApprovedError ):
            complete_request( self.request_model.id, self.receiver, { 'confirmation_code': self.code } )

        database.session.expire_all()
        self.assertEqual( self.donor.successful_donations, 1 )
        self.assertEqual( self.receiver.successful_receives, 1 )
        self.assertEqual( CertificateModel.query.count(), 1 )

    def test_pending_request_cannot_complete( self ):
        donation = create_donation( self.donor )
        pending, _, _ = create_request( self.receiver, get_request_payload( donation.id ) )
        with self.assertRaises( RequestNotApprovedError ):
            complete_request( pending.id, self.receiver, { 'confirmation_code': 'ABC123' } )

    @mock.patch( 'feed_in_need.controllers.request.issue_certificate', side_effect=RuntimeError( 'disk full' ) )
    def test_certificate_failure_keeps_the_completion( self, mock_issue ):
        request_model, certificate = complete_request(
            self.request_model.id, self.receiver, { 'confirmation_code': self.code }
        )

        mock_issue.assert_called_once_with( self.request_model.id )
        self.assertIsNone( certificate )
        database.session.expire_all()
        self.assertEqual( request_model.status, 'completed' )
        self.assertEqual( self.donation.status, 'completed' )
        self.assertEqual( self.receiver.successful_receives, 1 )

        summary = completion_summary( request_model, certificate )
        self.assertTrue( summary[ 'can_rate' ] )
        self.assertIsNone( summary[ 'certificate' ] )

    def test_completion_summary( self ):
        request_model, certificate = complete_request(
            self.request_model.id, self.receiver, { 'confirmation_code': self.code }
        )
        summary = completion_summary( request_model, certificate )

        self.assertEqual( summary[ 'request_id' ], request_model.id )
        self.assertEqual( summary[ 'certificate' ][ 'certificate_id' ], certificate.certificate_id )
        self.assertEqual(
            summary[ 'certificate' ][ 'share_url' ], '/share/certificate/{}'.format( certificate.certificate_id )
        )

    def test_qr_for_another_donation( self ):
        mismatched = json.loads( self.request_model.qr_code_data )
        mismatched[ 'donationId' ] = 999999
        with self.assertRaises( QRCodeInvalidError ):
            complete_by_qr( self.receiver, { 'qr_data': json.dumps( mismatched ) } )

        del mismatched[ 'donationId' ]
        with self.assertRaises( QRCodeInvalidError ):
            complete_by_qr( self.receiver, { 'qr_data': json.dumps( mismatched ) } )

        database.session.expire_all()
        self.assertEqual( self.request_model.status, 'approved' )
        self.assertEqual( self.donation.status, 'claimed' )

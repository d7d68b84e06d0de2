"""Tests of the request lifecycle: creation and auto-approval, admin review, cancel and the pickup QR payload."""
import json

import mock
from marshmallow import ValidationError

from feed_in_need.controllers.request import MESSAGE_BOTH_TRUSTED
from feed_in_need.controllers.request import MESSAGE_PENDING
from feed_in_need.controllers.request import MESSAGE_RECEIVER_TRUSTED
from feed_in_need.controllers.request import cancel_request
from feed_in_need.controllers.request import create_request
from feed_in_need.controllers.request import get_all_requests
from feed_in_need.controllers.request import get_my_requests
from feed_in_need.controllers.request import get_pickup_qr_data
from feed_in_need.controllers.request import get_request
from feed_in_need.controllers.request import review_request
from feed_in_need.exceptions.exception_authorization import NotRequestDonorError
from feed_in_need.exceptions.exception_authorization import NotRequestReceiverError
from feed_in_need.exceptions.exception_authorization import ReceiverNotVerifiedError
from feed_in_need.exceptions.exception_lifecycle import DonationExpiredError
from feed_in_need.exceptions.exception_lifecycle import DonationNotAvailableError
from feed_in_need.exceptions.exception_lifecycle import DuplicateRequestError
from feed_in_need.exceptions.exception_lifecycle import RequestNotApprovedError
from feed_in_need.exceptions.exception_lifecycle import RequestNotPendingError
from feed_in_need.exceptions.exception_model import ModelDonationNotFoundError
from feed_in_need.exceptions.exception_validation import RequestMessageTooShortError
from feed_in_need.flask_essentials import database
from feed_in_need.models.notification import NotificationModel
from feed_in_need.models.request import RequestModel
from tests.helpers.default_dictionaries import get_request_payload
from tests.helpers.default_dictionaries import in_hours
from tests.helpers.feed_test_case import FeedTestCase
from tests.helpers.model_helpers import create_admin
from tests.helpers.model_helpers import create_approved_request
from tests.helpers.model_helpers import create_donation
from tests.helpers.model_helpers import create_donor
from tests.helpers.model_helpers import create_receiver


class RequestLifecycleTestCase( FeedTestCase ):
    """python -m pytest tests/test_request_lifecycle.py"""

    def setUp( self ):
        super().setUp()
        self.donor = create_donor()
        self.trusted_donor = create_donor( email='trusted-donor@example.org', is_trusted=True )
        self.admin = create_admin()
        self.receiver = create_receiver()
        self.trusted_receiver = create_receiver( email='trusted-receiver@example.org', is_trusted=True )
        self.donation = create_donation( self.donor )

    def test_untrusted_receiver_request_waits_for_the_admin( self ):
        request_model, auto_approved, message = create_request(
            self.receiver, get_request_payload( self.donation.id )
        )

        self.assertFalse( auto_approved )
        self.assertEqual( message, MESSAGE_PENDING )
        self.assertEqual( request_model.status, 'pending' )
        self.assertIsNone( request_model.confirmation_code )
        self.assertEqual( self.donation.status, 'requested' )
        self.assertEqual( self.sent_email_kinds(), [ 'request_pending_approval' ] )

    def test_trusted_donor_alone_does_not_auto_approve( self ):
        donation = create_donation( self.trusted_donor )
        request_model, auto_approved, message = create_request( self.receiver, get_request_payload( donation.id ) )

        self.assertFalse( auto_approved )
        self.assertEqual( message, MESSAGE_PENDING )
        self.assertEqual( request_model.status, 'pending' )

    def test_trusted_receiver_is_auto_approved( self ):
        request_model, auto_approved, message = create_request(
            self.trusted_receiver, get_request_payload( self.donation.id, { 'message': '' } )
        )

        self.assertTrue( auto_approved )
        self.assertEqual( message, MESSAGE_RECEIVER_TRUSTED )
        self.assertEqual( request_model.status, 'approved' )
        self.assertEqual( len( request_model.confirmation_code ), 6 )
        qr_payload = json.loads( request_model.qr_code_data )
        self.assertEqual( qr_payload[ 'requestId' ], request_model.id )
        self.assertEqual( qr_payload[ 'donationId' ], self.donation.id )
        self.assertEqual( qr_payload[ 'code' ], request_model.confirmation_code )
        self.assertEqual( self.donation.status, 'claimed' )

        notification = NotificationModel.query.filter_by( user_id=self.donor.id ).one()
        self.assertEqual( notification.type, 'new_request' )
        self.assertEqual( self.sent_email_kinds(), [] )

    def test_both_trusted_keeps_its_own_message( self ):
        donation = create_donation( self.trusted_donor )
        request_model, auto_approved, message = create_request(
            self.trusted_receiver, get_request_payload( donation.id )
        )

        self.assertTrue( auto_approved )
        self.assertEqual( message, MESSAGE_BOTH_TRUSTED )
        self.assertIn( 'Both', request_model.review_notes )

    def test_creation_checks( self ):
        unverified = create_receiver( email='pending@example.org', verification_status='pending' )
        with self.assertRaises( ReceiverNotVerifiedError ):
            create_request( unverified, get_request_payload( self.donation.id ) )

        with self.assertRaises( RequestMessageTooShortError ):
            create_request( self.receiver, get_request_payload( self.donation.id, { 'message': 'Need food.' } ) )

        with self.assertRaises( ModelDonationNotFoundError ):
            create_request( self.receiver, get_request_payload( 424242 ) )

        unapproved = create_donation( self.donor, { 'is_approved': False } )
        with self.assertRaises( ModelDonationNotFoundError ):
            create_request( self.receiver, get_request_payload( unapproved.id ) )

        claimed = create_donation( self.donor, { 'status': 'claimed' } )
        with self.assertRaises( DonationNotAvailableError ) as context:
            create_request( self.receiver, get_request_payload( claimed.id ) )
        self.assertIn( 'claimed', context.exception.message )

        expired = create_donation( self.donor, { 'expiry_date_time': in_hours( -1 ) } )
        with self.assertRaises( DonationExpiredError ):
            create_request( self.receiver, get_request_payload( expired.id ) )

        with self.assertRaises( ValidationError ):
            create_request( self.receiver, { 'message': 'A message without the donation it is for.' } )

        self.assertEqual( RequestModel.query.count(), 0 )

    def test_one_request_per_receiver_and_donation( self ):
        """A second request by the same receiver conflicts, even once the donation is available again."""

        request_model, _, _ = create_request( self.receiver, get_request_payload( self.donation.id ) )
        cancel_request( request_model.id, self.receiver )
        self.assertEqual( self.donation.status, 'available' )

        with self.assertRaises( DuplicateRequestError ):
            create_request( self.receiver, get_request_payload( self.donation.id ) )
        self.assertEqual( RequestModel.query.count(), 1 )

    @mock.patch( 'feed_in_need.controllers.request.find_request', return_value=None )
    def test_unique_constraint_backs_the_duplicate_check( self, mock_find ):
        """With the lookup missing an earlier request, the database constraint still refuses the second one."""

        request_model, _, _ = create_request( self.receiver, get_request_payload( self.donation.id ) )
        cancel_request( request_model.id, self.receiver )

        with self.assertRaises( DuplicateRequestError ):
            create_request( self.receiver, get_request_payload( self.donation.id ) )

        mock_find.assert_called_with( self.receiver.id, self.donation.id )
        self.assertEqual( RequestModel.query.count(), 1 )
        self.assertEqual( self.donation.status, 'available' )

    def test_admin_approval( self ):
        request_model, _, _ = create_request( self.receiver, get_request_payload( self.donation.id ) )

        reviewed = review_request( request_model.id, self.admin, { 'status': 'approved', 'review_notes': 'OK' } )

        self.assertEqual( reviewed.status, 'approved' )
        self.assertEqual( reviewed.reviewed_by_id, self.admin.id )
        self.assertEqual( len( reviewed.confirmation_code ), 6 )
        self.assertEqual( self.donation.status, 'claimed' )
        self.assertEqual(
            NotificationModel.query.filter_by( user_id=self.receiver.id ).one().type, 'food_request_approved'
        )
        self.assertEqual( NotificationModel.query.filter_by( user_id=self.donor.id ).one().type, 'new_request' )

    def test_admin_rejection_is_terminal( self ):
        request_model, _, _ = create_request( self.receiver, get_request_payload( self.donation.id ) )

        reviewed = review_request( request_model.id, self.admin, { 'status': 'rejected' } )

        self.assertEqual( reviewed.status, 'rejected' )
        self.assertIsNone( reviewed.confirmation_code )
        self.assertEqual( self.donation.status, 'available' )
        with self.assertRaises( RequestNotPendingError ):
            review_request( request_model.id, self.admin, { 'status': 'approved' } )
        with self.assertRaises( ValidationError ):
            review_request( request_model.id, self.admin, { 'status': 'maybe' } )

    def test_cancel_only_while_pending( self ):
        request_model = create_approved_request( self.receiver, self.donation, self.admin )
        with self.assertRaises( RequestNotPendingError ):
            cancel_request( request_model.id, self.receiver )

        other_donation = create_donation( self.donor )
        pending, _, _ = create_request( self.receiver, get_request_payload( other_donation.id ) )
        with self.assertRaises( NotRequestReceiverError ):
            cancel_request( pending.id, self.trusted_receiver )
        self.assertEqual( cancel_request( pending.id, self.receiver ).status, 'cancelled' )
        self.assertEqual( other_donation.status, 'available' )

    def test_read_access( self ):
        request_model, _, _ = create_request( self.receiver, get_request_payload( self.donation.id ) )
        self.assertEqual( get_request( request_model.id, self.receiver ).id, request_model.id )
        self.assertEqual( get_request( request_model.id, self.admin ).id, request_model.id )
        with self.assertRaises( NotRequestReceiverError ):
            get_request( request_model.id, self.trusted_receiver )
        self.assertEqual( [ mine.id for mine in get_my_requests( self.receiver ) ], [ request_model.id ] )
        self.assertEqual( get_all_requests( { 'status': 'pending' }, 1, 20 ).total, 1 )

    def test_pickup_qr_data_for_the_donor( self ):
        request_model, _, _ = create_request( self.receiver, get_request_payload( self.donation.id ) )
        with self.assertRaises( RequestNotApprovedError ):
            get_pickup_qr_data( request_model.id, self.donor )

        review_request( request_model.id, self.admin, { 'status': 'approved' } )
        qr_data = get_pickup_qr_data( request_model.id, self.donor )
        self.assertEqual( qr_data[ 'confirmation_code' ], request_model.confirmation_code )
        self.assertEqual( json.loads( qr_data[ 'qr_data' ] )[ 'requestId' ], request_model.id )

        with self.assertRaises( NotRequestDonorError ):
            get_pickup_qr_data( request_model.id, self.receiver )

    def test_credentials_never_outside_approved_or_completed( self ):
        for status in ( 'approved', 'rejected' ):
            donation = create_donation( self.donor )
            request_model, _, _ = create_request( self.receiver, get_request_payload( donation.id ) )
            review_request( request_model.id, self.admin, { 'status': status } )
        database.session.expire_all()

        for request_model in RequestModel.query.all():
            has_code = request_model.confirmation_code is not None
            self.assertEqual( has_code, request_model.status in ( 'approved', 'completed' ) )

"""Tests of the administration controllers: verification, account removal, admins and the dashboard."""
from marshmallow import ValidationError

from feed_in_need.controllers.admin import create_admin as create_admin_account
from feed_in_need.controllers.admin import delete_admin
from feed_in_need.controllers.admin import delete_user
from feed_in_need.controllers.admin import get_all_admins
from feed_in_need.controllers.admin import get_dashboard_stats
from feed_in_need.controllers.admin import get_users_by_role
from feed_in_need.controllers.admin import verify_user
from feed_in_need.controllers.request import create_request
from feed_in_need.controllers.user import find_user_by_email
from feed_in_need.exceptions.exception_authorization import ProtectedUserError
from feed_in_need.exceptions.exception_lifecycle import UserAlreadyExistsError
from feed_in_need.exceptions.exception_lifecycle import UserRoleMismatchError
from feed_in_need.exceptions.exception_model import ModelUserNotFoundError
from feed_in_need.exceptions.exception_validation import ReasonRequiredError
from feed_in_need.exceptions.exception_validation import ValidationFailedError
from feed_in_need.models.donation import DonationModel
from feed_in_need.models.notification import NotificationModel
from feed_in_need.models.user import UserModel
from tests.helpers.default_dictionaries import get_request_payload
from tests.helpers.feed_test_case import FeedTestCase
from tests.helpers.model_helpers import create_admin
from tests.helpers.model_helpers import create_donation
from tests.helpers.model_helpers import create_donor
from tests.helpers.model_helpers import create_receiver


class AdminTestCase( FeedTestCase ):
    """python -m pytest tests/test_admin.py"""

    def setUp( self ):
        super().setUp()
        self.superadmin = create_admin( email='root@example.org', role='superadmin' )
        self.admin = create_admin()
        self.donor = create_donor()
        self.receiver = create_receiver( verification_status='pending' )

    def test_approve_receiver( self ):
        user = verify_user( self.receiver.id, self.admin, 'receiver', { 'status': 'approved' } )

        self.assertEqual( user.verification_status, 'approved' )
        self.assertIsNotNone( user.verified_at )
        self.assertTrue( user.is_verified_receiver )
        self.assertEqual(
            NotificationModel.query.filter_by( user_id=user.id ).one().type, 'verification_approved'
        )
        payload = self.mock_email_post.call_args[ 1 ][ 'json' ]
        self.assertEqual( payload[ 'kind' ], 'verification_result' )
        self.assertEqual( payload[ 'recipient' ], self.receiver.email )
        self.assertEqual( payload[ 'data' ][ 'status' ], 'approved' )

    def test_reject_needs_a_reason( self ):
        with self.assertRaises( ReasonRequiredError ):
            verify_user( self.receiver.id, self.admin, 'receiver', { 'status': 'rejected', 'rejection_reason': ' ' } )
        with self.assertRaises( ValidationError ):
            verify_user( self.receiver.id, self.admin, 'receiver', { 'status': 'maybe' } )

        user = verify_user( self.receiver.id, self.admin, 'receiver', {
            'status': 'rejected', 'rejection_reason': 'Registration document is unreadable.'
        } )
        self.assertEqual( user.verification_status, 'rejected' )
        self.assertEqual( user.rejected_by_id, self.admin.id )
        self.assertEqual( user.rejection_reason, 'Registration document is unreadable.' )
        self.assertEqual(
            NotificationModel.query.filter_by( user_id=user.id ).one().type, 'verification_rejected'
        )

    def test_verify_checks_the_role( self ):
        with self.assertRaises( UserRoleMismatchError ):
            verify_user( self.donor.id, self.admin, 'receiver', { 'status': 'approved' } )
        with self.assertRaises( ModelUserNotFoundError ):
            verify_user( 424242, self.admin, 'donor', { 'status': 'approved' } )
        self.assertEqual( verify_user( self.donor.id, self.admin, 'donor', { 'status': 'approved' } ).role, 'donor' )

    def test_users_by_role( self ):
        create_receiver( email='second@example.org' )

        self.assertEqual( get_users_by_role( 'receiver', None, 1, 20 ).total, 2 )
        pending = get_users_by_role( 'receiver', 'pending', 1, 20 )
        self.assertEqual( [ user.id for user in pending.items ], [ self.receiver.id ] )
        self.assertEqual( get_users_by_role( None, None, 1, 20 ).total, 5 )

    def test_delete_protections( self ):
        with self.assertRaises( ProtectedUserError ):
            delete_user( self.superadmin.id, self.admin )
        with self.assertRaises( ProtectedUserError ):
            delete_user( self.superadmin.id, self.superadmin )
        other_admin = create_admin( email='other-admin@example.org' )
        with self.assertRaises( ProtectedUserError ) as context:
            delete_user( other_admin.id, self.admin )
        self.assertEqual( context.exception.message, 'Only superadmin can delete admins.' )

        self.assertTrue( delete_user( other_admin.id, self.superadmin ) )
        self.assertTrue( delete_user( self.donor.id, self.admin ) )
        self.assertIsNone( find_user_by_email( 'donor@example.org' ) )

    def test_donations_remain_after_the_donor_is_deleted( self ):
        donation_id = create_donation( self.donor ).id
        delete_user( self.donor.id, self.admin )

        remaining = DonationModel.query.filter_by( id=donation_id ).one()
        self.assertIsNone( remaining.donor )
        self.assertEqual( get_dashboard_stats()[ 'donations' ][ 'total' ], 1 )

    def test_admin_accounts( self ):
        admin = create_admin_account( {
            'name': ' New Admin ', 'email': 'New.Admin@Example.org', 'password': 'long-password'
        } )
        self.assertEqual( admin.email, 'new.admin@example.org' )
        self.assertEqual( admin.name, 'New Admin' )
        self.assertTrue( admin.is_email_verified )
        self.assertTrue( admin.check_password( 'long-password' ) )
        self.assertEqual( len( get_all_admins() ), 2 )

        with self.assertRaises( UserAlreadyExistsError ):
            create_admin_account( { 'name': 'Again', 'email': 'new.admin@example.org', 'password': 'long-password' } )
        with self.assertRaises( ValidationError ):
            create_admin_account( { 'name': 'Short', 'email': 'short@example.org', 'password': '123' } )

        with self.assertRaises( ValidationFailedError ):
            delete_admin( self.donor.id )
        self.assertTrue( delete_admin( admin.id ) )
        self.assertIsNone( UserModel.query.filter_by( email='new.admin@example.org' ).first() )

    def test_dashboard_stats( self ):
        approved_receiver = create_receiver( email='approved@example.org', is_trusted=True )
        create_donation( self.donor, { 'is_approved': False } )
        donation = create_donation( self.donor )
        create_request( approved_receiver, get_request_payload( donation.id ) )

        stats = get_dashboard_stats()

        self.assertEqual( stats[ 'users' ][ 'donors' ], 1 )
        self.assertEqual( stats[ 'users' ][ 'receivers' ], 2 )
        self.assertEqual( stats[ 'users' ][ 'admins' ], 1 )
        self.assertEqual( stats[ 'users' ][ 'pending_receivers' ], 1 )
        self.assertEqual( stats[ 'users' ][ 'trusted' ], 1 )
        self.assertEqual( stats[ 'donations' ][ 'total' ], 2 )
        self.assertEqual( stats[ 'donations' ][ 'pending_approval' ], 1 )
        self.assertEqual( stats[ 'donations' ][ 'by_status' ], { 'available': 1, 'claimed': 1 } )
        self.assertEqual( stats[ 'requests' ][ 'total' ], 1 )
        self.assertEqual( stats[ 'requests' ][ 'by_status' ], { 'approved': 1 } )
        self.assertEqual( stats[ 'requests' ][ 'pending' ], 0 )

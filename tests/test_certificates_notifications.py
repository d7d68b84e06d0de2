"""Tests of certificates, in-app notifications and admin inbox messages."""
from urllib.parse import quote

from marshmallow import ValidationError

from feed_in_need.controllers.certificate import get_certificate
from feed_in_need.controllers.certificate import get_certificate_by_donation
from feed_in_need.controllers.certificate import get_my_certificates
from feed_in_need.controllers.certificate import get_received_certificates
from feed_in_need.controllers.certificate import get_share_urls
from feed_in_need.controllers.certificate import update_certificate_image
from feed_in_need.controllers.message import delete_message
from feed_in_need.controllers.message import get_message
from feed_in_need.controllers.message import get_my_messages
from feed_in_need.controllers.message import send_message_to_user
from feed_in_need.controllers.notification import get_my_notifications
from feed_in_need.controllers.notification import mark_all_notifications_read
from feed_in_need.controllers.notification import mark_notification_read
from feed_in_need.exceptions.exception_authorization import AuthorizationError
from feed_in_need.exceptions.exception_model import ModelCertificateNotFoundError
from feed_in_need.exceptions.exception_model import ModelMessageNotFoundError
from feed_in_need.exceptions.exception_model import ModelNotificationNotFoundError
from feed_in_need.helpers.notification import notify
from feed_in_need.models.notification import MessageModel
from tests.helpers.feed_test_case import FeedTestCase
from tests.helpers.model_helpers import create_admin
from tests.helpers.model_helpers import create_completed_transaction
from tests.helpers.model_helpers import create_donor
from tests.helpers.model_helpers import create_receiver


class CertificateTestCase( FeedTestCase ):
    """python -m pytest tests/test_certificates_notifications.py"""

    def setUp( self ):
        super().setUp()
        self.donor = create_donor()
        self.receiver = create_receiver()
        self.admin = create_admin()
        self.request_model, self.certificate = create_completed_transaction( self.donor, self.receiver, self.admin )

    def test_lookup_is_case_insensitive( self ):
        certificate_id = self.certificate.certificate_id
        self.assertEqual( get_certificate( certificate_id.lower() ).id, self.certificate.id )
        with self.assertRaises( ModelCertificateNotFoundError ):
            get_certificate( 'NOT-A-CERTIFICATE' )

    def test_certificate_snapshot( self ):
        self.assertEqual( self.certificate.food_title, 'Rice and dal' )
        self.assertEqual( self.certificate.quantity, '20 servings' )
        self.assertIn( self.donor.name, self.certificate.og_title )
        self.assertEqual( self.certificate.request_id, self.request_model.id )

    def test_listings( self ):
        self.assertEqual( [ mine.id for mine in get_my_certificates( self.donor ) ], [ self.certificate.id ] )
        self.assertEqual( [ mine.id for mine in get_received_certificates( self.receiver ) ], [ self.certificate.id ] )
        self.assertEqual( get_my_certificates( self.receiver ), [] )

    def test_by_donation_for_participants_only( self ):
        donation_id = self.certificate.donation_id
        for user in ( self.donor, self.receiver, self.admin ):
            self.assertEqual( get_certificate_by_donation( donation_id, user ).id, self.certificate.id )

        stranger = create_donor( email='stranger@example.org' )
        with self.assertRaises( AuthorizationError ):
            get_certificate_by_donation( donation_id, stranger )
        with self.assertRaises( ModelCertificateNotFoundError ):
            get_certificate_by_donation( 424242, self.donor )

    def test_share_urls( self ):
        self.app.config[ 'FRONTEND_URL' ] = 'https://feedinneed.org/'
        urls = get_share_urls( self.certificate.certificate_id )

        share_url = 'https://feedinneed.org/share/certificate/{}'.format( self.certificate.certificate_id )
        self.assertEqual( urls[ 'share_url' ], share_url )
        encoded = quote( share_url, safe='' )
        self.assertEqual( urls[ 'facebook' ], 'https://www.facebook.com/sharer/sharer.php?u={}'.format( encoded ) )
        self.assertIn( encoded, urls[ 'linkedin' ] )
        self.assertTrue( urls[ 'whatsapp' ].startswith( 'https://wa.me/?text=' ) )
        self.assertIn( '&url={}'.format( encoded ), urls[ 'twitter' ] )

    def test_image_update( self ):
        image_url = 'https://cdn.example.org/certificates/1.png'
        with self.assertRaises( AuthorizationError ):
            update_certificate_image( self.certificate.certificate_id, self.receiver, { 'image_url': image_url } )
        with self.assertRaises( ValidationError ):
            update_certificate_image( self.certificate.certificate_id, self.donor, { 'image_url': 'not a url' } )

        certificate = update_certificate_image(
            self.certificate.certificate_id, self.donor, { 'image_url': image_url }
        )
        self.assertEqual( certificate.image_url, image_url )


class NotificationTestCase( FeedTestCase ):
    """python -m pytest tests/test_certificates_notifications.py"""

    def setUp( self ):
        super().setUp()
        self.donor = create_donor()
        self.receiver = create_receiver()
        self.admin = create_admin()

    def test_notifications_and_read_state( self ):
        first = notify( self.donor.id, 'general', 'Welcome', 'Welcome to Feed In Need.' )
        notify( self.donor.id, 'donation_approved', 'Donation Approved', 'Your donation is live.',
                link='/donor/donations', data={ 'donation_id': 1 } )
        notify( self.receiver.id, 'general', 'Welcome', 'Welcome to Feed In Need.' )

        notifications, unread_count = get_my_notifications( self.donor )
        self.assertEqual( unread_count, 2 )
        self.assertEqual( [ n.type for n in notifications ], [ 'donation_approved', 'general' ] )
        self.assertEqual( notifications[ 0 ].data, { 'donation_id': 1 } )

        self.assertTrue( mark_notification_read( first.id, self.donor ).is_read )
        unread, unread_count = get_my_notifications( self.donor, unread_only=True )
        self.assertEqual( unread_count, 1 )
        self.assertEqual( len( unread ), 1 )

        with self.assertRaises( ModelNotificationNotFoundError ):
            mark_notification_read( first.id, self.receiver )

        self.assertEqual( mark_all_notifications_read( self.donor ), 1 )
        self.assertEqual( get_my_notifications( self.donor )[ 1 ], 0 )
        self.assertEqual( get_my_notifications( self.receiver )[ 1 ], 1 )

    def test_admin_message( self ):
        message, email_result = send_message_to_user( self.receiver.id, self.admin, {
            'subject': ' Missing document ',
            'message': 'Please upload your registration certificate.',
            'action_required': 'Upload document'
        } )

        self.assertEqual( message.subject, 'Missing document' )
        self.assertEqual( email_result, { 'success': True } )
        self.assertEqual( self.sent_email_kinds(), [ 'admin_message' ] )
        self.assertEqual( get_my_notifications( self.receiver )[ 0 ][ 0 ].type, 'admin_message' )

        page, unread_count = get_my_messages( self.receiver, False, 1, 20 )
        self.assertEqual( page.total, 1 )
        self.assertEqual( unread_count, 1 )

        with self.assertRaises( ModelMessageNotFoundError ):
            get_message( message.id, self.donor )
        read = get_message( message.id, self.receiver )
        self.assertTrue( read.is_read )
        self.assertIsNotNone( read.read_at )
        self.assertEqual( get_my_messages( self.receiver, True, 1, 20 )[ 0 ].total, 0 )

        self.assertTrue( delete_message( message.id, self.receiver ) )
        self.assertEqual( MessageModel.query.count(), 0 )

    def test_admin_message_when_email_fails( self ):
        self.mock_email_post.return_value.status_code = 500

        message, email_result = send_message_to_user( self.receiver.id, self.admin, {
            'subject': 'Hello', 'message': 'A message.'
        } )

        self.assertFalse( email_result[ 'success' ] )
        self.assertIsNotNone( message.id )
        self.assertEqual( get_my_messages( self.receiver, False, 1, 20 )[ 1 ], 1 )

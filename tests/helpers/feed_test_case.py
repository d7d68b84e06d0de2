"""The common set up of the unit tests: a TEST application, a fresh in-memory database and a mocked email service."""
import unittest

import mock

from feed_in_need.app import create_app
from feed_in_need.flask_essentials import database


class FeedTestCase( unittest.TestCase ):
    """Base test case. Every test runs inside a pushed application context.

    The email service is replaced by a mock answering 200, available as self.mock_email_post; a test may set another
    return_value or side_effect on it.
    """

    def setUp( self ):
        self.app = create_app( 'TEST' )
        self.app.testing = True
        self.test_client = self.app.test_client()

        self.app_context = self.app.app_context()
        self.app_context.push()
        database.drop_all()
        database.create_all()

        patcher = mock.patch( 'feed_in_need.helpers.email.requests.post' )
        self.mock_email_post = patcher.start()
        self.mock_email_post.return_value.status_code = 200
        self.addCleanup( patcher.stop )

    def tearDown( self ):
        database.session.remove()
        database.drop_all()
        self.app_context.pop()

    def sent_email_kinds( self ):
        """The kinds of the emails posted to the email service, in order."""
        return [ call[ 1 ][ 'json' ][ 'kind' ] for call in self.mock_email_post.call_args_list ]

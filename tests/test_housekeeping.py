"""Tests of the housekeeping sweep of unverified accounts and of the cron job wrappers."""
from datetime import datetime
from datetime import timedelta

import mock

import jobs.housekeeping
from feed_in_need.controllers.user import cleanup_unverified_users
from feed_in_need.controllers.user import find_user_by_email
from tests.helpers.feed_test_case import FeedTestCase
from tests.helpers.model_helpers import create_user


class CleanupUnverifiedUsersTestCase( FeedTestCase ):
    """python -m pytest tests/test_housekeeping.py"""

    def setUp( self ):
        super().setUp()
        for email, role, verified in (
                ( 'verified@example.org', 'donor', True ),
                ( 'unverified-donor@example.org', 'donor', False ),
                ( 'unverified-receiver@example.org', 'receiver', False ),
                ( 'unverified-admin@example.org', 'admin', False ) ):
            create_user( { 'email': email, 'role': role, 'is_email_verified': verified } )

    def test_only_old_unverified_donors_and_receivers( self ):
        self.assertEqual( cleanup_unverified_users(), 0 )

        later = datetime.utcnow() + timedelta( hours=25 )
        self.assertEqual( cleanup_unverified_users( now=later ), 2 )

        self.assertIsNotNone( find_user_by_email( 'verified@example.org' ) )
        self.assertIsNotNone( find_user_by_email( 'unverified-admin@example.org' ) )
        self.assertIsNone( find_user_by_email( 'unverified-donor@example.org' ) )
        self.assertIsNone( find_user_by_email( 'unverified-receiver@example.org' ) )

    def test_age_cutoff_is_configurable( self ):
        later = datetime.utcnow() + timedelta( hours=3 )
        self.assertEqual( cleanup_unverified_users( hours_old=24, now=later ), 0 )
        self.assertEqual( cleanup_unverified_users( hours_old=2, now=later ), 2 )


class HousekeepingJobsTestCase( FeedTestCase ):
    """The cron wrappers call the controllers inside the job's own application context."""

    @mock.patch( 'jobs.housekeeping.cleanup_unverified_users_controller', return_value=3 )
    def test_cleanup_job( self, mock_cleanup ):
        self.assertEqual( jobs.housekeeping.cleanup_unverified_users( 48 ), 3 )
        mock_cleanup.assert_called_once_with( 48 )

    @mock.patch( 'jobs.housekeeping.expire_donations_controller', return_value=2 )
    def test_expire_job( self, mock_expire ):
        self.assertEqual( jobs.housekeeping.expire_donations(), 2 )
        mock_expire.assert_called_once_with()

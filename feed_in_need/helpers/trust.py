"""The rating aggregates and the trusted badge.

The badge is awarded by the machine when a user has at least TRUST_MIN_TRANSACTIONS completed transactions in their
role and an average rating of at least TRUST_MIN_RATING. The engine never takes the badge away: only an admin revokes
it. The thresholds are carried by a TrustPolicy, built from the application configuration, so that tests and
deployments can override them without touching the engine.
"""
import logging
from datetime import datetime
from decimal import Decimal
from decimal import ROUND_HALF_UP

from flask import current_app
from sqlalchemy import func

from feed_in_need.flask_essentials import database
from feed_in_need.models.donation import DonationModel
from feed_in_need.models.rating import RatingModel
from feed_in_need.models.request import RequestModel
from feed_in_need.models.user import UserModel

DEFAULT_MIN_TRANSACTIONS = 3
DEFAULT_MIN_RATING = 4.0


class TrustPolicy:
    """The thresholds for the machine awarded trusted badge."""

    def __init__( self, min_transactions=DEFAULT_MIN_TRANSACTIONS, min_rating=DEFAULT_MIN_RATING ):
        self.min_transactions = int( min_transactions )
        self.min_rating = float( min_rating )

    def is_met( self, successful_transactions, average_rating ):
        return successful_transactions >= self.min_transactions and average_rating >= self.min_rating

    def __repr__( self ):
        return 'TrustPolicy( min_transactions={}, min_rating={} )'.format( self.min_transactions, self.min_rating )


def trust_policy_from_config( config=None ):
    """Build the policy from TRUST_MIN_TRANSACTIONS and TRUST_MIN_RATING.

    :param dict config: Defaults to the current application's config.
    :return: TrustPolicy
    """

    if config is None:
        config = current_app.config
    return TrustPolicy(
        config.get( 'TRUST_MIN_TRANSACTIONS', DEFAULT_MIN_TRANSACTIONS ),
        config.get( 'TRUST_MIN_RATING', DEFAULT_MIN_RATING )
    )


def round_rating( value ):
    """Round half up to one decimal: 4.25 -> 4.3, where round() would give 4.2."""
    return float( Decimal( str( value ) ).quantize( Decimal( '0.1' ), rounding=ROUND_HALF_UP ) )


def update_user_rating_stats( user_id ):
    """Recompute average_rating and total_ratings from every rating the user has received.

    Works inside the caller's transaction: nothing is committed here.

    :param int user_id: The rated user.
    :return: The user, or None if the user no longer exists.
    """

    user = database.session.get( UserModel, user_id )
    if not user:
        logging.warning( 'Rating stats: user %s not found.', user_id )
        return None

    total, count = database.session.query(
        func.sum( RatingModel.rating ), func.count( RatingModel.id )
    ).filter( RatingModel.rated_user_id == user_id ).one()

    if count:
        user.average_rating = round_rating( Decimal( total ) / Decimal( count ) )
    else:
        user.average_rating = 0.0
    user.total_ratings = count
    return user


class TrustEngine:
    """Evaluates and awards the trusted badge under a TrustPolicy."""

    def __init__( self, policy=None ):
        self.policy = policy or trust_policy_from_config()

    def recount_successful_transactions( self, user ):
        """Count completed requests attributable to the user in their role and store the count on the user.

        Donors are credited with completed requests across all their donations, receivers with the completed requests
        they made. Any other role has no transactions.

        :param UserModel user: The user.
        :return: The count.
        """

        if user.role == 'donor':
            count = database.session.query( func.count( RequestModel.id ) ) \
                .join( DonationModel, DonationModel.id == RequestModel.donation_id ) \
                .filter( DonationModel.donor_id == user.id, RequestModel.status == 'completed' ) \
                .scalar()
            user.successful_donations = count
        elif user.role == 'receiver':
            count = database.session.query( func.count( RequestModel.id ) ) \
                .filter( RequestModel.receiver_id == user.id, RequestModel.status == 'completed' ) \
                .scalar()
            user.successful_receives = count
        else:
            count = 0
        return count

    def is_eligible( self, user, successful_transactions ):
        return self.policy.is_met( successful_transactions, user.average_rating or 0.0 )

    def check_and_award( self, user_id, now=None ):
        """Award the badge if the user qualifies. A no-op for a user who is already trusted.

        The average rating is read after a flush and refresh, so a rating written earlier in the same transaction is
        taken into account.

        :param int user_id: The user to evaluate.
        :param datetime now: The award time, defaults to utcnow.
        :return: True if the badge was awarded by this call.
        """

        user = database.session.get( UserModel, user_id )
        if not user or user.is_trusted:
            return False

        count = self.recount_successful_transactions( user )
        database.session.flush()
        database.session.refresh( user )

        if not self.is_eligible( user, count ):
            logging.debug(
                'Trust check for user %s: %s transactions, rating %s under %r.',
                user_id, count, user.average_rating, self.policy
            )
            return False

        user.is_trusted = True
        user.trusted_at = now or datetime.utcnow()
        logging.info( 'User %s earned the trusted badge.', user_id )
        return True

    def badge_requirements( self, user ):
        """Progress towards the badge, for the user's own stats page."""

        count = user.successful_transactions
        return {
            'min_transactions': self.policy.min_transactions,
            'min_rating': self.policy.min_rating,
            'current_transactions': count,
            'current_rating': user.average_rating,
            'meets_transactions': count >= self.policy.min_transactions,
            'meets_rating': ( user.average_rating or 0.0 ) >= self.policy.min_rating
        }

"""Controllers for Flask-RESTful resources: ratings and the trusted badge.

Once a request is completed its donor rates the receiver and its receiver rates the donor, each at most once. The
rating, the rated user's aggregates, the request flag and, when both sides have rated, the trust evaluation of both
parties are committed in one transaction.
"""
import logging
from datetime import datetime

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from feed_in_need.controllers.request import get_request_or_404
from feed_in_need.controllers.user import get_user_or_404
from feed_in_need.exceptions.exception_authorization import NotTransactionParticipantError
from feed_in_need.exceptions.exception_lifecycle import RatingAlreadySubmittedError
from feed_in_need.exceptions.exception_lifecycle import RequestNotCompletedError
from feed_in_need.exceptions.exception_lifecycle import UserAlreadyTrustedError
from feed_in_need.exceptions.exception_lifecycle import UserNotTrustedError
from feed_in_need.exceptions.exception_model import ModelDonationNotFoundError
from feed_in_need.flask_essentials import database
from feed_in_need.helpers.manage_paginate import convert_into_page
from feed_in_need.helpers.notification import notify
from feed_in_need.helpers.post_commit import PostCommitHooks
from feed_in_need.helpers.trust import TrustEngine
from feed_in_need.helpers.trust import trust_policy_from_config
from feed_in_need.helpers.trust import update_user_rating_stats
from feed_in_need.helpers.validation import load_payload
from feed_in_need.helpers.validation import require_reason
from feed_in_need.models.donation import DonationModel
from feed_in_need.models.rating import RatingModel
from feed_in_need.schemas.rating import RatingPayloadSchema


def _rating_direction( request_model, donation, user ):
    """Who the user rates on this request.

    :return: ( rating_type, rated_user_id, rated_role, already_rated )
    """

    if donation.donor_id == user.id:
        return 'donor_to_receiver', request_model.receiver_id, 'receiver', request_model.receiver_rated
    if request_model.receiver_id == user.id:
        return 'receiver_to_donor', donation.donor_id, 'donor', request_model.donor_rated
    raise NotTransactionParticipantError()


def submit_rating( user, payload ):
    """Rate the other party of a completed request.

    The donor rating the receiver sets receiver_rated, the receiver rating the donor sets donor_rated. The unique
    constraint on the rating table catches a concurrent duplicate the flags did not.

    :param UserModel user: The caller.
    :param dict payload: { request_id, rating, feedback }
    :return: ( RatingModel, list of user IDs awarded the trusted badge )
    """

    data = load_payload( RatingPayloadSchema(), payload )
    request_model = get_request_or_404( data[ 'request_id' ], lock=True )
    if request_model.status != 'completed':
        raise RequestNotCompletedError( request_model.status )
    donation = database.session.get( DonationModel, request_model.donation_id )
    if donation is None:
        raise ModelDonationNotFoundError()

    rating_type, rated_user_id, rated_role, already_rated = _rating_direction( request_model, donation, user )
    if already_rated:
        raise RatingAlreadySubmittedError( rated_role )

    rating = RatingModel(
        request_id=request_model.id,
        donation_id=donation.id,
        rated_user_id=rated_user_id,
        rated_by_id=user.id,
        rating_type=rating_type,
        rating=data[ 'rating' ],
        feedback=( data.get( 'feedback' ) or '' ).strip()
    )
    database.session.add( rating )
    try:
        database.session.flush()
    except IntegrityError:
        database.session.rollback()
        raise RatingAlreadySubmittedError()

    if rating_type == 'donor_to_receiver':
        request_model.receiver_rated = True
    else:
        request_model.donor_rated = True
    update_user_rating_stats( rated_user_id )

    awarded = []
    if request_model.donor_rated and request_model.receiver_rated:
        engine = TrustEngine( trust_policy_from_config() )
        for user_id in ( donation.donor_id, request_model.receiver_id ):
            if engine.check_and_award( user_id ):
                awarded.append( user_id )

    database.session.commit()

    hooks = PostCommitHooks()
    for user_id in awarded:
        hooks.add(
            'badge_{}'.format( user_id ), notify, user_id, 'trusted_badge_earned', 'Trusted Badge Earned',
            'Congratulations! You earned the trusted badge. Your future donations and requests are approved '
            'automatically.'
        )
    hooks.run()

    logging.info( 'Rating %s submitted by user %s for user %s.', rating.id, user.id, rated_user_id )
    return rating, awarded


def get_user_ratings( user_id, page, per_page ):
    """The ratings a user has received, newest first.

    :return: ( UserModel, Pagination )
    """

    user = get_user_or_404( user_id )
    query = RatingModel.query.filter_by( rated_user_id=user.id ).order_by( RatingModel.created_at.desc() )
    return user, convert_into_page( query, page, per_page )


def can_rate_request( request_id, user ):
    """Whether the user may rate the other party of a request, and why not."""

    request_model = get_request_or_404( request_id )
    if request_model.status != 'completed':
        return { 'can_rate': False, 'reason': 'Transaction not completed yet.' }

    donation = database.session.get( DonationModel, request_model.donation_id )
    if donation is None:
        return { 'can_rate': False, 'reason': 'Donation no longer exists.' }
    try:
        rating_type, rated_user_id, rated_role, already_rated = _rating_direction( request_model, donation, user )
    except NotTransactionParticipantError:
        return { 'can_rate': False, 'reason': 'Not a participant of this transaction.' }

    if already_rated:
        return { 'can_rate': False, 'reason': 'You have already rated this {}.'.format( rated_role ) }
    return {
        'can_rate': True,
        'rating_type': rating_type,
        'rated_user_id': rated_user_id,
        'rated_role': rated_role
    }


def get_my_rating_stats( user ):
    """The caller's aggregates, breakdown by star value and progress towards the badge."""

    breakdown = { star: 0 for star in range( 1, 6 ) }
    rows = database.session.query( RatingModel.rating, func.count( RatingModel.id ) ) \
        .filter( RatingModel.rated_user_id == user.id ) \
        .group_by( RatingModel.rating ).all()
    for star, count in rows:
        breakdown[ star ] = count

    engine = TrustEngine( trust_policy_from_config() )
    return {
        'average_rating': user.average_rating,
        'total_ratings': user.total_ratings,
        'successful_transactions': user.successful_transactions,
        'is_trusted': user.is_trusted,
        'trusted_at': user.trusted_at.isoformat() if user.trusted_at else None,
        'breakdown': breakdown,
        'badge_requirements': engine.badge_requirements( user )
    }


def grant_trusted_badge( user_id, admin ):
    """An admin gives the trusted badge, whatever the user's transactions and rating."""

    user = get_user_or_404( user_id )
    if user.is_trusted:
        raise UserAlreadyTrustedError()

    user.is_trusted = True
    user.trusted_at = datetime.utcnow()
    user.trusted_by_id = admin.id
    user.trusted_removed_at = None
    user.trusted_removed_by_id = None
    user.trusted_removal_reason = None
    database.session.commit()

    hooks = PostCommitHooks()
    hooks.add(
        'notification', notify, user.id, 'trusted_badge_given', 'Trusted Badge Awarded',
        'An admin has given you the trusted badge. Your future donations and requests are approved automatically.'
    )
    hooks.run()
    logging.info( 'Trusted badge given to user %s by admin %s.', user.id, admin.id )
    return user


def revoke_trusted_badge( user_id, admin, reason ):
    """An admin removes the trusted badge, with a reason of at least MIN_TRUST_REMOVAL_REASON_LENGTH characters."""

    minimum = current_app.config.get( 'MIN_TRUST_REMOVAL_REASON_LENGTH', 10 )
    reason = require_reason(
        reason, minimum,
        'Please provide a reason for removing the trusted badge (minimum {} characters).'.format( minimum )
    )
    user = get_user_or_404( user_id )
    if not user.is_trusted:
        raise UserNotTrustedError()

    user.is_trusted = False
    user.trusted_removed_at = datetime.utcnow()
    user.trusted_removed_by_id = admin.id
    user.trusted_removal_reason = reason
    database.session.commit()

    hooks = PostCommitHooks()
    hooks.add(
        'notification', notify, user.id, 'trusted_badge_removed', 'Trusted Badge Removed',
        'Your trusted badge has been removed. Reason: {}'.format( reason )
    )
    hooks.run()
    logging.info( 'Trusted badge removed from user %s by admin %s.', user.id, admin.id )
    return user

"""Transition tables for donations and requests, and the only functions that assign their status.

Every status change goes through transition_donation() or transition_request(). A move that is not in the table
raises InvalidStateTransitionError, which the application maps to 409 Conflict.

    DONATION: available -> requested, claimed, expired, cancelled
              requested -> available, claimed, expired, cancelled
              claimed   -> completed
    REQUEST:  pending   -> approved, rejected, cancelled
              approved  -> completed

Entering approved assigns the pickup credentials to the request. Leaving the set { approved, completed } clears them.
"""
import logging

from feed_in_need.exceptions.exception_lifecycle import InvalidStateTransitionError
from feed_in_need.helpers.pickup_credentials import assign_pickup_credentials
from feed_in_need.helpers.pickup_credentials import clear_pickup_credentials

DONATION_TRANSITIONS = {
    'available': frozenset( [ 'requested', 'claimed', 'expired', 'cancelled' ] ),
    'requested': frozenset( [ 'available', 'claimed', 'expired', 'cancelled' ] ),
    'claimed': frozenset( [ 'completed' ] ),
    'completed': frozenset(),
    'expired': frozenset(),
    'cancelled': frozenset()
}

REQUEST_TRANSITIONS = {
    'pending': frozenset( [ 'approved', 'rejected', 'cancelled' ] ),
    'approved': frozenset( [ 'completed' ] ),
    'rejected': frozenset(),
    'completed': frozenset(),
    'cancelled': frozenset()
}

# A request carries a confirmation code exactly while in one of these.
CREDENTIAL_STATUSES = frozenset( [ 'approved', 'completed' ] )


def can_transition( transitions, from_status, to_status ):
    """True if the table allows from_status -> to_status.

    :param dict transitions: One of DONATION_TRANSITIONS or REQUEST_TRANSITIONS.
    :param str from_status: The current status.
    :param str to_status: The target status.
    :return: bool
    """

    return to_status in transitions.get( from_status, frozenset() )


def is_terminal( transitions, status ):
    return not transitions.get( status )


def transition_donation( donation, to_status ):
    """Move a donation to to_status, or raise InvalidStateTransitionError.

    :param DonationModel donation: The donation, attached to the current session.
    :param str to_status: The target status.
    :return: The donation.
    """

    from_status = donation.status
    if not can_transition( DONATION_TRANSITIONS, from_status, to_status ):
        raise InvalidStateTransitionError( 'donation', from_status, to_status )

    donation.status = to_status
    logging.debug( 'Donation %s: %s -> %s', donation.id, from_status, to_status )
    return donation


def transition_request( request_model, to_status ):
    """Move a request to to_status, or raise InvalidStateTransitionError.

    The request must have an id, i.e. be flushed, before it is approved since the QR payload carries it.

    :param RequestModel request_model: The request, attached to the current session.
    :param str to_status: The target status.
    :return: The request.
    """

    from_status = request_model.status
    if not can_transition( REQUEST_TRANSITIONS, from_status, to_status ):
        raise InvalidStateTransitionError( 'request', from_status, to_status )

    request_model.status = to_status
    if to_status == 'approved':
        assign_pickup_credentials( request_model )
    elif to_status not in CREDENTIAL_STATUSES:
        clear_pickup_credentials( request_model )

    logging.debug( 'Request %s: %s -> %s', request_model.id, from_status, to_status )
    return request_model

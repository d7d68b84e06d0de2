"""Controllers for Flask-RESTful resources: the request lifecycle.

A receiver requests a donation. The request is approved at once when the receiver holds the trusted badge, whatever
the donor's badge; otherwise it waits for an admin. An approved request carries the pickup credentials, and the
receiver completes it by presenting the confirmation code, scanning the donor's QR code, or typing the code alone.

Each transition touching several rows (request, donation, user counters) is written in one transaction and committed
once. Notifications, email and the certificate are post-commit hooks.
"""
import logging
from datetime import datetime

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from feed_in_need.controllers.certificate import issue_certificate
from feed_in_need.controllers.certificate import share_path
from feed_in_need.controllers.donation import get_donation_or_404
from feed_in_need.controllers.user import increment_counter
from feed_in_need.exceptions.exception_authorization import NotRequestDonorError
from feed_in_need.exceptions.exception_authorization import NotRequestReceiverError
from feed_in_need.exceptions.exception_authorization import ReceiverNotVerifiedError
from feed_in_need.exceptions.exception_lifecycle import DonationExpiredError
from feed_in_need.exceptions.exception_lifecycle import DonationNotAvailableError
from feed_in_need.exceptions.exception_lifecycle import DuplicateRequestError
from feed_in_need.exceptions.exception_lifecycle import RequestNotApprovedError
from feed_in_need.exceptions.exception_lifecycle import RequestNotPendingError
from feed_in_need.exceptions.exception_model import ModelDonationNotFoundError
from feed_in_need.exceptions.exception_model import ModelRequestNotFoundError
from feed_in_need.exceptions.exception_validation import ConfirmationCodeInvalidError
from feed_in_need.exceptions.exception_validation import ConfirmationCodeRequiredError
from feed_in_need.exceptions.exception_validation import QRCodeInvalidError
from feed_in_need.exceptions.exception_validation import RequestMessageTooShortError
from feed_in_need.flask_essentials import database
from feed_in_need.helpers.email import send_admin_email
from feed_in_need.helpers.lifecycle import transition_donation
from feed_in_need.helpers.lifecycle import transition_request
from feed_in_need.helpers.manage_paginate import convert_into_page
from feed_in_need.helpers.notification import notify
from feed_in_need.helpers.pickup_credentials import codes_match
from feed_in_need.helpers.pickup_credentials import parse_qr_payload
from feed_in_need.helpers.post_commit import PostCommitHooks
from feed_in_need.helpers.validation import load_payload
from feed_in_need.models.donation import DonationModel
from feed_in_need.models.request import RequestModel
from feed_in_need.schemas.request import CompletionPayloadSchema
from feed_in_need.schemas.request import RequestPayloadSchema
from feed_in_need.schemas.request import RequestReviewPayloadSchema

MESSAGE_BOTH_TRUSTED = 'Request auto-approved! Both you and the donor are trusted users. You can proceed to pickup.'
MESSAGE_RECEIVER_TRUSTED = 'Request auto-approved! As a trusted user, you can proceed to pickup.'
MESSAGE_PENDING = 'Request submitted successfully. Waiting for admin approval.'

REVIEW_NOTES_BOTH_TRUSTED = 'Auto-approved: Both donor and receiver are trusted users'
REVIEW_NOTES_RECEIVER_TRUSTED = 'Auto-approved: Receiver is a trusted user'


def get_request_or_404( request_id, lock=False ):
    query = RequestModel.query.filter( RequestModel.id == request_id )
    if lock:
        query = query.with_for_update()
    request_model = query.first()
    if not request_model:
        raise ModelRequestNotFoundError()
    return request_model


def find_request( receiver_id, donation_id ):
    return RequestModel.query.filter_by( receiver_id=receiver_id, donation_id=donation_id ).first()


def create_request( receiver, payload ):
    """A receiver requests a donation.

    An untrusted receiver must explain the need in at least MIN_REQUEST_MESSAGE_LENGTH characters. The donation must
    exist, be approved, available and unexpired, and the receiver may request it only once.

    Auto-approval depends on the receiver's badge alone. The donor's badge only selects the message: a trusted donor
    without a trusted receiver still goes to the admin.

    :param UserModel receiver: The caller, a receiver.
    :param dict payload: { donation_id, message, servings_needed }
    :return: ( RequestModel, auto_approved, message )
    """

    if not receiver.is_verified_receiver:
        raise ReceiverNotVerifiedError()

    data = load_payload( RequestPayloadSchema(), payload )
    message = ( data.get( 'message' ) or '' ).strip()
    minimum = current_app.config.get( 'MIN_REQUEST_MESSAGE_LENGTH', 20 )
    if not receiver.is_trusted and len( message ) < minimum:
        raise RequestMessageTooShortError( minimum )

    donation = get_donation_or_404( data[ 'donation_id' ], lock=True )
    if not donation.is_approved:
        raise ModelDonationNotFoundError()
    if donation.status != 'available':
        raise DonationNotAvailableError( donation.status )
    if donation.is_expired():
        raise DonationExpiredError()
    if find_request( receiver.id, donation.id ):
        raise DuplicateRequestError()

    request_model = RequestModel(
        receiver_id=receiver.id,
        donation_id=donation.id,
        message=message,
        servings_needed=data.get( 'servings_needed' ),
        status='pending'
    )
    database.session.add( request_model )
    try:
        database.session.flush()
    except IntegrityError:
        database.session.rollback()
        raise DuplicateRequestError()

    hooks = PostCommitHooks()
    auto_approved = bool( receiver.is_trusted )
    if auto_approved:
        donor = donation.donor
        both_trusted = donor is not None and donor.is_trusted
        transition_request( request_model, 'approved' )
        request_model.reviewed_at = datetime.utcnow()
        request_model.review_notes = REVIEW_NOTES_BOTH_TRUSTED if both_trusted else REVIEW_NOTES_RECEIVER_TRUSTED
        transition_donation( donation, 'claimed' )
        result_message = MESSAGE_BOTH_TRUSTED if both_trusted else MESSAGE_RECEIVER_TRUSTED
        hooks.add(
            'donor_notification', notify, donation.donor_id, 'new_request', 'Request Auto-Approved',
            '{} (trusted receiver) will pick up "{}". Share the pickup code when they arrive.'.format(
                receiver.name, donation.food_title
            ),
            link='/donor/donations', data={ 'donation_id': donation.id, 'request_id': request_model.id }
        )
    else:
        transition_donation( donation, 'requested' )
        result_message = MESSAGE_PENDING
        hooks.add( 'admin_email', send_admin_email, 'request_pending_approval', {
            'request_id': request_model.id,
            'donation_id': donation.id,
            'food_title': donation.food_title,
            'receiver_name': receiver.name,
            'receiver_email': receiver.email,
            'message': message
        } )

    database.session.commit()
    hooks.run()

    logging.info( 'Request %s created by receiver %s, auto approved: %s.', request_model.id, receiver.id,
                  auto_approved )
    return request_model, auto_approved, result_message


def review_request( request_id, admin, payload ):
    """An admin approves or rejects a pending request.

    Approval issues the pickup credentials and claims the donation. Rejection returns the donation to available.

    :param int request_id: The request ID.
    :param UserModel admin: The caller.
    :param dict payload: { status: approved | rejected, review_notes }
    :return: The RequestModel.
    """

    data = load_payload( RequestReviewPayloadSchema(), payload )
    request_model = get_request_or_404( request_id, lock=True )
    if request_model.status != 'pending':
        raise RequestNotPendingError( request_model.status )
    donation = get_donation_or_404( request_model.donation_id, lock=True )

    request_model.reviewed_by_id = admin.id
    request_model.reviewed_at = datetime.utcnow()
    request_model.review_notes = data.get( 'review_notes' )

    hooks = PostCommitHooks()
    if data[ 'status' ] == 'approved':
        transition_request( request_model, 'approved' )
        transition_donation( donation, 'claimed' )
        hooks.add(
            'receiver_notification', notify, request_model.receiver_id, 'food_request_approved',
            'Request Approved',
            'Your request for "{}" has been approved. You can proceed to pickup.'.format( donation.food_title ),
            link='/receiver/requests', data={ 'request_id': request_model.id, 'donation_id': donation.id }
        )
        hooks.add(
            'donor_notification', notify, donation.donor_id, 'new_request', 'Request Approved',
            'A request for your donation "{}" has been approved. Share the pickup code when the receiver '
            'arrives.'.format( donation.food_title ),
            link='/donor/donations', data={ 'request_id': request_model.id, 'donation_id': donation.id }
        )
    else:
        transition_request( request_model, 'rejected' )
        if donation.status == 'requested':
            transition_donation( donation, 'available' )
        hooks.add(
            'receiver_notification', notify, request_model.receiver_id, 'food_request_rejected',
            'Request Not Approved',
            'Your request for "{}" was not approved.'.format( donation.food_title ),
            link='/receiver/requests', data={ 'request_id': request_model.id, 'donation_id': donation.id }
        )

    database.session.commit()
    hooks.run()
    logging.info( 'Request %s %s by admin %s.', request_model.id, request_model.status, admin.id )
    return request_model


def _complete( request_model, presented_code ):
    """Complete an approved request whose code matches, then issue the certificate.

    :return: ( RequestModel, CertificateModel or None )
    """

    if request_model.status != 'approved':
        raise RequestNotApprovedError( request_model.status )
    if not codes_match( presented_code, request_model.confirmation_code ):
        raise ConfirmationCodeInvalidError()

    donation = database.session.query( DonationModel ) \
        .filter( DonationModel.id == request_model.donation_id ).with_for_update().first()
    if not donation:
        raise ModelDonationNotFoundError()

    now = datetime.utcnow()
    transition_request( request_model, 'completed' )
    request_model.completed_at = now
    transition_donation( donation, 'completed' )
    donation.claimed_by_id = request_model.receiver_id
    donation.claimed_at = now
    increment_counter( donation.donor_id, 'successful_donations' )
    increment_counter( request_model.receiver_id, 'successful_receives' )
    database.session.commit()
    logging.info( 'Request %s completed.', request_model.id )

    hooks = PostCommitHooks()
    hooks.add( 'certificate', issue_certificate, request_model.id )
    results = hooks.run()
    return request_model, results[ 'certificate' ]


def completion_summary( request_model, certificate ):
    """The response data of the three completion paths."""

    certificate_data = None
    if certificate is not None:
        certificate_data = {
            'certificate_id': certificate.certificate_id,
            'share_url': share_path( certificate.certificate_id )
        }
    return {
        'request_id': request_model.id,
        'can_rate': True,
        'certificate': certificate_data
    }


def complete_request( request_id, receiver, payload ):
    """Complete a request by its ID with the confirmation code.

    :param int request_id: The request ID.
    :param UserModel receiver: The caller, who must be the request's receiver.
    :param dict payload: { confirmation_code }
    :return: ( RequestModel, CertificateModel or None )
    """

    code = load_payload( CompletionPayloadSchema(), payload ).get( 'confirmation_code' )
    if not code or not code.strip():
        raise ConfirmationCodeRequiredError()

    request_model = get_request_or_404( request_id, lock=True )
    if request_model.receiver_id != receiver.id:
        raise NotRequestReceiverError( 'Not authorized to complete this request.' )
    return _complete( request_model, code )


def complete_by_qr( receiver, payload ):
    """Complete a request from the scanned pickup QR payload.

    :param UserModel receiver: The caller, who must be the receiver named by the payload's request.
    :param dict payload: { qr_data }
    :return: ( RequestModel, CertificateModel or None )
    """

    qr_data = load_payload( CompletionPayloadSchema(), payload ).get( 'qr_data' )
    if not qr_data:
        raise QRCodeInvalidError( 'QR code data is required.' )
    qr_payload = parse_qr_payload( qr_data )

    try:
        request_id = int( qr_payload[ 'requestId' ] )
    except ( TypeError, ValueError ):
        raise QRCodeInvalidError()

    request_model = get_request_or_404( request_id, lock=True )
    try:
        donation_id = int( qr_payload.get( 'donationId' ) )
    except ( TypeError, ValueError ):
        raise QRCodeInvalidError()
    if donation_id != request_model.donation_id:
        raise QRCodeInvalidError()
    if request_model.receiver_id != receiver.id:
        raise NotRequestReceiverError( 'This pickup QR code is not for your request.' )
    return _complete( request_model, qr_payload[ 'code' ] )


def complete_by_code( receiver, payload ):
    """Complete a request from the confirmation code alone, searched among the receiver's approved requests.

    :param UserModel receiver: The caller.
    :param dict payload: { confirmation_code }
    :return: ( RequestModel, CertificateModel or None )
    """

    code = load_payload( CompletionPayloadSchema(), payload ).get( 'confirmation_code' )
    if not code or not code.strip():
        raise ConfirmationCodeRequiredError()

    request_model = RequestModel.query.filter(
        RequestModel.receiver_id == receiver.id,
        RequestModel.status == 'approved',
        func.upper( RequestModel.confirmation_code ) == code.strip().upper()
    ).with_for_update().first()
    if not request_model:
        raise ConfirmationCodeInvalidError( 'Invalid confirmation code. No matching approved request found.' )
    return _complete( request_model, code )


def cancel_request( request_id, receiver ):
    """The receiver withdraws a pending request and the donation becomes available again."""

    request_model = get_request_or_404( request_id, lock=True )
    if request_model.receiver_id != receiver.id:
        raise NotRequestReceiverError( 'Not authorized to cancel this request.' )
    if request_model.status != 'pending':
        raise RequestNotPendingError( request_model.status, 'cancel' )

    transition_request( request_model, 'cancelled' )
    donation = database.session.query( DonationModel ) \
        .filter( DonationModel.id == request_model.donation_id ).with_for_update().first()
    if donation is not None and donation.status == 'requested':
        transition_donation( donation, 'available' )
    database.session.commit()
    return request_model


def get_my_requests( receiver ):
    return RequestModel.query.filter_by( receiver_id=receiver.id ).order_by( RequestModel.created_at.desc() ).all()


def get_request( request_id, user ):
    """A single request, for its receiver or an admin."""

    request_model = get_request_or_404( request_id )
    if request_model.receiver_id != user.id and not user.is_admin:
        raise NotRequestReceiverError()
    return request_model


def get_pickup_qr_data( request_id, user ):
    """The pickup QR payload and confirmation code, for the donor of the request's donation.

    :return: dict with request_id, qr_data and confirmation_code.
    """

    request_model = get_request_or_404( request_id )
    donation = database.session.get( DonationModel, request_model.donation_id )
    if donation is None:
        raise ModelDonationNotFoundError()
    if donation.donor_id != user.id:
        raise NotRequestDonorError()
    if request_model.status != 'approved':
        raise RequestNotApprovedError( request_model.status, 'view the pickup QR code of' )

    return {
        'request_id': request_model.id,
        'qr_data': request_model.qr_code_data,
        'confirmation_code': request_model.confirmation_code
    }


def get_all_requests( filters, page, per_page ):
    """Every request for the admin, optionally filtered by status.

    :return: A Pagination object.
    """

    query = RequestModel.query
    if filters.get( 'status' ):
        query = query.filter( RequestModel.status == filters[ 'status' ] )
    return convert_into_page( query.order_by( RequestModel.created_at.desc() ), page, per_page )


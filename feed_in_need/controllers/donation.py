"""Controllers for Flask-RESTful resources: the donation lifecycle.

A donation is auto-approved at creation when its donor holds the trusted badge, otherwise an admin approves it. The
public only sees approved, available and unexpired donations. Status changes go through helpers.lifecycle.
"""
import logging
from datetime import datetime
from math import ceil

from flask import current_app

from feed_in_need.exceptions.exception_authorization import DonationEditForbiddenError
from feed_in_need.exceptions.exception_authorization import NotDonationOwnerError
from feed_in_need.exceptions.exception_model import ModelApprovedRequestNotFoundError
from feed_in_need.exceptions.exception_model import ModelDonationNotFoundError
from feed_in_need.exceptions.exception_validation import ValidationFailedError
from feed_in_need.flask_essentials import database
from feed_in_need.helpers.email import send_admin_email
from feed_in_need.helpers.geo import sort_by_distance
from feed_in_need.helpers.lifecycle import transition_donation
from feed_in_need.helpers.lifecycle import transition_request
from feed_in_need.helpers.manage_paginate import convert_into_page
from feed_in_need.helpers.manage_paginate import paging_keys
from feed_in_need.helpers.notification import notify
from feed_in_need.helpers.pickup_credentials import assign_pickup_credentials
from feed_in_need.helpers.post_commit import PostCommitHooks
from feed_in_need.helpers.validation import load_payload
from feed_in_need.helpers.validation import parse_coordinates
from feed_in_need.helpers.validation import parse_expiry
from feed_in_need.helpers.validation import validate_photos
from feed_in_need.models.donation import DonationModel
from feed_in_need.models.request import RequestModel
from feed_in_need.schemas.donation import DonationApprovalPayloadSchema
from feed_in_need.schemas.donation import DonationPayloadSchema

EDITABLE_FIELDS = (
    'donor_phone', 'food_title', 'food_description', 'quantity', 'storage_condition', 'address', 'notes'
)


def get_donation_or_404( donation_id, lock=False ):
    query = DonationModel.query.filter( DonationModel.id == donation_id )
    if lock:
        query = query.with_for_update()
    donation = query.first()
    if not donation:
        raise ModelDonationNotFoundError()
    return donation


def create_donation( donor, payload ):
    """Create a donation for the donor.

    The donation is approved at once if the donor is trusted; otherwise the admin is emailed after the commit.

    :param UserModel donor: The caller.
    :param dict payload: The donation body, with food_photos a list of 1 to 3 URLs.
    :return: ( DonationModel, auto_approved )
    """

    data = load_payload( DonationPayloadSchema(), payload )
    photos = validate_photos( data.get( 'food_photos' ) )
    expiry = parse_expiry( data[ 'expiry_date_time' ] )
    latitude, longitude = parse_coordinates( data[ 'latitude' ], data[ 'longitude' ] )

    auto_approved = bool( donor.is_trusted )
    now = datetime.utcnow()
    donation = DonationModel(
        donor_id=donor.id,
        donor_phone=data[ 'donor_phone' ],
        food_title=data[ 'food_title' ],
        food_description=data[ 'food_description' ],
        quantity=data[ 'quantity' ],
        storage_condition=data.get( 'storage_condition', 'room_temperature' ),
        food_photos=photos,
        expiry_date_time=expiry,
        latitude=latitude,
        longitude=longitude,
        address=data[ 'address' ],
        notes=data.get( 'notes' ),
        status='available',
        is_approved=auto_approved,
        approved_by_id=donor.id if auto_approved else None,
        approved_at=now if auto_approved else None
    )
    database.session.add( donation )
    database.session.commit()

    if not auto_approved:
        hooks = PostCommitHooks()
        hooks.add( 'admin_email', send_admin_email, 'donation_pending_approval', {
            'donation_id': donation.id,
            'food_title': donation.food_title,
            'quantity': donation.quantity,
            'donor_name': donor.name,
            'donor_email': donor.email
        } )
        hooks.run()

    logging.info( 'Donation %s created by donor %s, auto approved: %s.', donation.id, donor.id, auto_approved )
    return donation, auto_approved


def approve_donation( donation_id, admin, payload ):
    """Approve or reject a donation. The donor is notified either way.

    :param int donation_id: The donation ID.
    :param UserModel admin: The caller.
    :param dict payload: { approved: bool }
    :return: The DonationModel.
    """

    approved = load_payload( DonationApprovalPayloadSchema(), payload )[ 'approved' ]
    donation = get_donation_or_404( donation_id )

    donation.is_approved = approved
    if approved:
        donation.approved_by_id = admin.id
        donation.approved_at = datetime.utcnow()
    else:
        donation.approved_by_id = None
        donation.approved_at = None
    database.session.commit()

    hooks = PostCommitHooks()
    if approved:
        hooks.add(
            'notification', notify, donation.donor_id, 'donation_approved', 'Donation Approved',
            'Your donation "{}" has been approved and is now visible to receivers.'.format( donation.food_title ),
            link='/donor/donations', data={ 'donation_id': donation.id }
        )
    else:
        hooks.add(
            'notification', notify, donation.donor_id, 'donation_rejected', 'Donation Not Approved',
            'Your donation "{}" was not approved by the admin.'.format( donation.food_title ),
            link='/donor/donations', data={ 'donation_id': donation.id }
        )
    hooks.run()
    return donation


def update_donation( donation_id, user, payload ):
    """Update a donation.

    The gates are evaluated in order: ownership, claimed, completed, approved. Admins pass all of them. A trusted
    donor may still edit an approved donation.

    :param int donation_id: The donation ID.
    :param UserModel user: The caller.
    :param dict payload: The fields to change.
    :return: The DonationModel.
    """

    donation = get_donation_or_404( donation_id )
    is_admin = user.is_admin

    if donation.donor_id != user.id and not is_admin:
        raise NotDonationOwnerError( 'update' )
    if donation.status == 'claimed' and not is_admin:
        raise DonationEditForbiddenError( 'Cannot edit a donation that has been claimed.' )
    if donation.status == 'completed' and not is_admin:
        raise DonationEditForbiddenError( 'Cannot edit a completed donation.' )
    if donation.is_approved and not is_admin and not user.is_trusted:
        raise DonationEditForbiddenError( 'Cannot edit an approved donation. Please contact the admin for changes.' )

    data = load_payload( DonationPayloadSchema(), payload, partial=True )
    for field in EDITABLE_FIELDS:
        if field in data:
            setattr( donation, field, data[ field ] )
    if 'food_photos' in data:
        donation.food_photos = validate_photos( data[ 'food_photos' ] )
    if 'expiry_date_time' in data:
        donation.expiry_date_time = parse_expiry( data[ 'expiry_date_time' ] )
    if 'latitude' in data or 'longitude' in data:
        donation.latitude, donation.longitude = parse_coordinates(
            data.get( 'latitude', donation.latitude ), data.get( 'longitude', donation.longitude )
        )

    database.session.commit()
    return donation


def delete_donation( donation_id, user ):
    """Hard delete a donation, whatever its status. Requests, ratings and certificates referring to it remain."""

    donation = get_donation_or_404( donation_id )
    if donation.donor_id != user.id and not user.is_admin:
        raise NotDonationOwnerError( 'delete' )

    database.session.delete( donation )
    database.session.commit()
    logging.info( 'Donation %s deleted by user %s.', donation_id, user.id )
    return True


def cancel_donation( donation_id, user ):
    """Withdraw a donation: the donation and any pending request on it are cancelled in one transaction.

    :param int donation_id: The donation ID.
    :param UserModel user: The owner or an admin.
    :return: The DonationModel.
    """

    donation = get_donation_or_404( donation_id, lock=True )
    if donation.donor_id != user.id and not user.is_admin:
        raise NotDonationOwnerError( 'cancel' )

    pending_requests = RequestModel.query.filter_by( donation_id=donation.id, status='pending' ).all()
    for request_model in pending_requests:
        transition_request( request_model, 'cancelled' )
    transition_donation( donation, 'cancelled' )
    database.session.commit()

    hooks = PostCommitHooks()
    for request_model in pending_requests:
        hooks.add(
            'notification_{}'.format( request_model.id ), notify, request_model.receiver_id, 'general',
            'Donation Cancelled',
            'The donation "{}" you requested has been cancelled by the donor.'.format( donation.food_title ),
            data={ 'donation_id': donation.id, 'request_id': request_model.id }
        )
    hooks.run()
    return donation


def _public_query( now ):
    return DonationModel.query.filter(
        DonationModel.is_approved.is_( True ),
        DonationModel.expiry_date_time > now
    )


def get_donations( filters, page, per_page ):
    """The public list of donations.

    Only approved, unexpired donations are listed, by default those still available. With latitude and longitude the
    list is ordered nearest first and each donation carries its distance in km.

    :param dict filters: Optional status, search, latitude and longitude.
    :param int page: Page number.
    :param int per_page: Rows per page.
    :return: ( donations, distances, paging ) where distances maps donation ID to km, or is None.
    """

    query = _public_query( datetime.utcnow() )
    query = query.filter( DonationModel.status == ( filters.get( 'status' ) or 'available' ) )
    if filters.get( 'search' ):
        query = query.filter( DonationModel.food_title.ilike( '%{}%'.format( filters[ 'search' ] ) ) )

    if filters.get( 'latitude' ) is not None and filters.get( 'longitude' ) is not None:
        latitude, longitude = parse_coordinates( filters[ 'latitude' ], filters[ 'longitude' ] )
        pairs = sort_by_distance( query.all(), latitude, longitude )
        total = len( pairs )
        start = ( page - 1 ) * per_page
        page_pairs = pairs[ start:start + per_page ]
        paging = {
            'count': len( page_pairs ),
            'total': total,
            'page': page,
            'pages': ceil( total / per_page ) if total else 0
        }
        donations = [ donation for donation, _ in page_pairs ]
        distances = { donation.id: distance for donation, distance in page_pairs }
        return donations, distances, paging

    pagination = convert_into_page( query.order_by( DonationModel.created_at.desc() ), page, per_page )
    return pagination.items, None, paging_keys( pagination )


def get_nearby_donations( latitude, longitude, radius_km=None ):
    """Available donations within radius_km of a point, nearest first.

    :return: A list of ( DonationModel, distance in km ).
    """

    if latitude is None or longitude is None:
        raise ValidationFailedError( 'Latitude and longitude are required.' )
    latitude, longitude = parse_coordinates( latitude, longitude )
    if radius_km is None:
        radius_km = current_app.config.get( 'NEARBY_RADIUS_KM', 10 )
    try:
        radius_km = float( radius_km )
    except ( TypeError, ValueError ):
        raise ValidationFailedError( 'Radius must be a number.' )

    donations = _public_query( datetime.utcnow() ).filter( DonationModel.status == 'available' ).all()
    return sort_by_distance( donations, latitude, longitude, radius_km )


def get_donation( donation_id, user=None ):
    """A single donation.

    An unapproved donation is only visible to its owner and the admins. The donor phone is shown to the owner, the
    admins and verified receivers.

    :param int donation_id: The donation ID.
    :param UserModel user: The caller, or None when anonymous.
    :return: ( DonationModel, show_phone )
    """

    donation = get_donation_or_404( donation_id )
    is_owner_or_admin = user is not None and ( user.id == donation.donor_id or user.is_admin )
    if not donation.is_approved and not is_owner_or_admin:
        raise ModelDonationNotFoundError()

    show_phone = is_owner_or_admin or ( user is not None and user.is_verified_receiver )
    return donation, show_phone


def get_my_donations( donor ):
    """The donor's donations, newest first, each with its completed request when there is one.

    :return: A list of ( DonationModel, RequestModel or None ).
    """

    donations = DonationModel.query.filter_by( donor_id=donor.id ).order_by( DonationModel.created_at.desc() ).all()
    completed_ids = [ donation.id for donation in donations if donation.status == 'completed' ]

    completed_requests = {}
    if completed_ids:
        for request_model in RequestModel.query.filter(
                RequestModel.donation_id.in_( completed_ids ), RequestModel.status == 'completed'
        ).all():
            completed_requests[ request_model.donation_id ] = request_model

    return [ ( donation, completed_requests.get( donation.id ) ) for donation in donations ]


def get_approved_request( donation_id, user ):
    """The approved request of a donation, with its pickup credentials, for the donor to show the receiver.

    Credentials missing from an older row are generated here.

    :param int donation_id: The donation ID.
    :param UserModel user: The donor or an admin.
    :return: The RequestModel.
    """

    donation = get_donation_or_404( donation_id )
    if donation.donor_id != user.id and not user.is_admin:
        raise NotDonationOwnerError( 'view the pickup details of' )

    request_model = RequestModel.query.filter_by( donation_id=donation.id, status='approved' ).first()
    if not request_model:
        raise ModelApprovedRequestNotFoundError()

    if not request_model.confirmation_code or not request_model.qr_code_data:
        assign_pickup_credentials( request_model )
        database.session.commit()
    return request_model


def get_all_donations( filters, page, per_page ):
    """Every donation for the admin, with optional status and approved filters.

    :param dict filters: status, and approved as 'true' or 'false'.
    :return: A Pagination object.
    """

    query = DonationModel.query
    if filters.get( 'status' ):
        query = query.filter( DonationModel.status == filters[ 'status' ] )
    approved = filters.get( 'approved' )
    if approved is not None and approved != '':
        query = query.filter( DonationModel.is_approved.is_( str( approved ).lower() == 'true' ) )

    return convert_into_page( query.order_by( DonationModel.created_at.desc() ), page, per_page )


def expire_donations( now=None ):
    """Move available donations past their expiry to expired.

    :param datetime now: The cutoff, defaults to utcnow.
    :return: The number of donations expired.
    """

    now = now or datetime.utcnow()
    donations = DonationModel.query.filter(
        DonationModel.status == 'available',
        DonationModel.expiry_date_time <= now
    ).all()
    for donation in donations:
        transition_donation( donation, 'expired' )
    database.session.commit()

    logging.info( 'Expired %s donations.', len( donations ) )
    return len( donations )

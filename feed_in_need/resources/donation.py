"""The Resources entry point for donations: the public list, the donor's own donations and the donation lifecycle."""
from http import HTTPStatus

from flask import current_app
from flask import request
from flask_jwt_extended import jwt_required
from flask_restful import Resource

from feed_in_need.controllers.donation import cancel_donation
from feed_in_need.controllers.donation import create_donation
from feed_in_need.controllers.donation import delete_donation
from feed_in_need.controllers.donation import get_approved_request
from feed_in_need.controllers.donation import get_donation
from feed_in_need.controllers.donation import get_donations
from feed_in_need.controllers.donation import get_my_donations
from feed_in_need.controllers.donation import get_nearby_donations
from feed_in_need.controllers.donation import update_donation
from feed_in_need.helpers.auth import AuthenticatedResource
from feed_in_need.helpers.auth import get_current_user
from feed_in_need.helpers.auth import get_optional_user
from feed_in_need.helpers.auth import roles_required
from feed_in_need.helpers.manage_paginate import get_page_information
from feed_in_need.helpers.model_serialization import to_json
from feed_in_need.helpers.responses import envelope
from feed_in_need.schemas.donation import DonationSchema
from feed_in_need.schemas.request import RequestSchema
# pylint: disable=too-few-public-methods
# pylint: disable=no-self-use

PUBLIC_EXCLUDE = ( 'donor_phone', )


class Donations( Resource ):
    """Flask-RESTful resource endpoints for the public list and for creating a donation."""

    method_decorators = { 'post': [ roles_required( 'donor' ), jwt_required() ] }

    def get( self ):
        """The approved, available and unexpired donations. Nearest first when latitude and longitude are given."""

        page, per_page = get_page_information( request.args, current_app.config.get( 'DONATIONS_PER_PAGE', 10 ) )
        filters = { key: request.args.get( key ) for key in ( 'status', 'search', 'latitude', 'longitude' ) }
        donations, distances, paging = get_donations( filters, page, per_page )

        data = DonationSchema( many=True, exclude=PUBLIC_EXCLUDE ).dump( donations )
        if distances is not None:
            for item in data:
                item[ 'distance' ] = distances[ item[ 'id' ] ]
        return envelope( data, **paging ), HTTPStatus.OK

    def post( self ):
        """A donor posts a donation."""

        donation, auto_approved = create_donation( get_current_user(), request.get_json( silent=True ) )
        if auto_approved:
            message = 'Donation created and auto-approved (trusted donor)!'
        else:
            message = 'Donation created successfully. Waiting for admin approval.'
        return envelope( to_json( DonationSchema(), donation ), message, auto_approved=auto_approved ), \
            HTTPStatus.CREATED


class NearbyDonations( Resource ):
    """Flask-RESTful resource endpoint for available donations near a point."""

    def get( self ):
        pairs = get_nearby_donations(
            request.args.get( 'latitude' ), request.args.get( 'longitude' ), request.args.get( 'radius' )
        )
        schema = DonationSchema( exclude=PUBLIC_EXCLUDE )
        data = []
        for donation, distance in pairs:
            item = schema.dump( donation )
            item[ 'distance' ] = distance
            data.append( item )
        return envelope( data, count=len( data ) ), HTTPStatus.OK


class MyDonations( Resource ):
    """Flask-RESTful resource endpoint for the donor's own donations."""

    method_decorators = [ roles_required( 'donor' ), jwt_required() ]

    def get( self ):
        schema = DonationSchema()
        data = []
        for donation, completed_request in get_my_donations( get_current_user() ):
            item = schema.dump( donation )
            if completed_request is not None:
                receiver = completed_request.receiver
                item[ 'completed_request' ] = {
                    'request_id': completed_request.id,
                    'receiver_name': receiver.name if receiver else None,
                    'completed_at': completed_request.completed_at.isoformat()
                    if completed_request.completed_at else None,
                    'donor_rated': completed_request.donor_rated,
                    'receiver_rated': completed_request.receiver_rated
                }
            data.append( item )
        return envelope( data, count=len( data ) ), HTTPStatus.OK


class DonationById( Resource ):
    """Flask-RESTful resource endpoints for a single donation."""

    method_decorators = {
        'put': [ jwt_required() ],
        'delete': [ jwt_required() ]
    }

    def get( self, donation_id ):
        """Anonymous callers are allowed. The owner and the admins also see unapproved donations."""

        donation, show_phone = get_donation( donation_id, get_optional_user() )
        schema = DonationSchema() if show_phone else DonationSchema( exclude=PUBLIC_EXCLUDE )
        return envelope( to_json( schema, donation ) ), HTTPStatus.OK

    def put( self, donation_id ):
        donation = update_donation( donation_id, get_current_user(), request.get_json( silent=True ) )
        return envelope( to_json( DonationSchema(), donation ), 'Donation updated successfully.' ), HTTPStatus.OK

    def delete( self, donation_id ):
        delete_donation( donation_id, get_current_user() )
        return envelope( message='Donation deleted successfully.' ), HTTPStatus.OK


class CancelDonation( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for the owner or an admin to withdraw a donation."""

    def put( self, donation_id ):
        donation = cancel_donation( donation_id, get_current_user() )
        return envelope( to_json( DonationSchema(), donation ), 'Donation cancelled.' ), HTTPStatus.OK


class DonationApprovedRequest( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for the donor to read the pickup code of the approved request."""

    def get( self, donation_id ):
        request_model = get_approved_request( donation_id, get_current_user() )
        return envelope( to_json( RequestSchema(), request_model ) ), HTTPStatus.OK

"""The Resources entry point for the admin and superadmin endpoints."""
from http import HTTPStatus

from flask import current_app
from flask import request

from feed_in_need.controllers.admin import create_admin
from feed_in_need.controllers.admin import delete_admin
from feed_in_need.controllers.admin import delete_user
from feed_in_need.controllers.admin import get_all_admins
from feed_in_need.controllers.admin import get_dashboard_stats
from feed_in_need.controllers.admin import get_user_by_id
from feed_in_need.controllers.admin import get_users_by_role
from feed_in_need.controllers.admin import verify_user
from feed_in_need.controllers.donation import approve_donation
from feed_in_need.controllers.donation import get_all_donations
from feed_in_need.controllers.message import send_message_to_user
from feed_in_need.controllers.rating import grant_trusted_badge
from feed_in_need.controllers.rating import revoke_trusted_badge
from feed_in_need.controllers.request import get_all_requests
from feed_in_need.controllers.request import review_request
from feed_in_need.helpers.auth import AdminResource
from feed_in_need.helpers.auth import SuperAdminResource
from feed_in_need.helpers.auth import get_current_user
from feed_in_need.helpers.manage_paginate import get_page_information
from feed_in_need.helpers.manage_paginate import paged_response
from feed_in_need.helpers.model_serialization import to_json
from feed_in_need.helpers.responses import envelope
from feed_in_need.helpers.validation import load_payload
from feed_in_need.schemas.donation import DonationSchema
from feed_in_need.schemas.notification import MessageSchema
from feed_in_need.schemas.request import RequestSchema
from feed_in_need.schemas.user import TrustRevokePayloadSchema
from feed_in_need.schemas.user import UserSchema
# pylint: disable=too-few-public-methods
# pylint: disable=no-self-use


def admin_page_information():
    return get_page_information( request.args, current_app.config.get( 'ADMIN_ROWS_PER_PAGE', 20 ) )


class DashboardStats( AdminResource ):
    """Flask-RESTful resource endpoint for the dashboard counts."""

    def get( self ):
        return envelope( get_dashboard_stats() ), HTTPStatus.OK


class AdminDonations( AdminResource ):
    """Flask-RESTful resource endpoint for every donation, filtered by status and approval."""

    def get( self ):
        page, per_page = admin_page_information()
        filters = { 'status': request.args.get( 'status' ), 'approved': request.args.get( 'approved' ) }
        pagination = get_all_donations( filters, page, per_page )
        return paged_response(
            pagination, DonationSchema( many=True ).dump( pagination.items ), request.args, request.base_url
        )


class AdminApproveDonation( AdminResource ):
    """Flask-RESTful resource endpoint to approve or reject a donation."""

    def put( self, donation_id ):
        donation = approve_donation( donation_id, get_current_user(), request.get_json( silent=True ) )
        message = 'Donation approved.' if donation.is_approved else 'Donation rejected.'
        return envelope( to_json( DonationSchema(), donation ), message ), HTTPStatus.OK


class AdminRequests( AdminResource ):
    """Flask-RESTful resource endpoint for every request, filtered by status."""

    def get( self ):
        page, per_page = admin_page_information()
        pagination = get_all_requests( { 'status': request.args.get( 'status' ) }, page, per_page )
        return paged_response(
            pagination, RequestSchema( many=True ).dump( pagination.items ), request.args, request.base_url
        )


class AdminReviewRequest( AdminResource ):
    """Flask-RESTful resource endpoint to approve or reject a pending request."""

    def put( self, request_id ):
        request_model = review_request( request_id, get_current_user(), request.get_json( silent=True ) )
        return envelope(
            to_json( RequestSchema(), request_model ), 'Request {} successfully.'.format( request_model.status )
        ), HTTPStatus.OK


class AdminUsersByRole( AdminResource ):
    """Flask-RESTful resource endpoint listing users of one role. The role is fixed by the route."""

    role = None

    def get( self ):
        page, per_page = admin_page_information()
        role = self.role or request.args.get( 'role' )
        pagination = get_users_by_role( role, request.args.get( 'status' ), page, per_page )
        return paged_response(
            pagination, UserSchema( many=True ).dump( pagination.items ), request.args, request.base_url
        )


class AdminReceivers( AdminUsersByRole ):
    """Flask-RESTful resource endpoint listing receivers."""

    role = 'receiver'


class AdminDonors( AdminUsersByRole ):
    """Flask-RESTful resource endpoint listing donors."""

    role = 'donor'


class AdminUsers( AdminUsersByRole ):
    """Flask-RESTful resource endpoint listing users of any role, or of the role in the query string."""


class AdminVerifyUser( AdminResource ):
    """Flask-RESTful resource endpoint to verify a donor or a receiver."""

    role = None

    def put( self, user_id ):
        user = verify_user( user_id, get_current_user(), self.role, request.get_json( silent=True ) )
        message = '{} {} successfully.'.format( self.role.capitalize(), user.verification_status )
        return envelope( to_json( UserSchema(), user ), message ), HTTPStatus.OK


class AdminVerifyReceiver( AdminVerifyUser ):
    role = 'receiver'


class AdminVerifyDonor( AdminVerifyUser ):
    role = 'donor'


class AdminUserById( AdminResource ):
    """Flask-RESTful resource endpoints to read or delete a user."""

    def get( self, user_id ):
        return envelope( to_json( UserSchema(), get_user_by_id( user_id ) ) ), HTTPStatus.OK

    def delete( self, user_id ):
        delete_user( user_id, get_current_user() )
        return envelope( message='User deleted successfully.' ), HTTPStatus.OK


class AdminMessageUser( AdminResource ):
    """Flask-RESTful resource endpoint to send an inbox message to a user."""

    def post( self, user_id ):
        message, email_result = send_message_to_user( user_id, get_current_user(), request.get_json( silent=True ) )
        return envelope(
            to_json( MessageSchema(), message ),
            'Message sent successfully.',
            email_sent=bool( email_result and email_result.get( 'success' ) )
        ), HTTPStatus.CREATED


class AdminUserTrust( AdminResource ):
    """Flask-RESTful resource endpoints to give or remove the trusted badge."""

    def put( self, user_id ):
        user = grant_trusted_badge( user_id, get_current_user() )
        return envelope( to_json( UserSchema(), user ), 'Trusted badge given successfully.' ), HTTPStatus.OK

    def delete( self, user_id ):
        reason = load_payload( TrustRevokePayloadSchema(), request.get_json( silent=True ) )[ 'reason' ]
        user = revoke_trusted_badge( user_id, get_current_user(), reason )
        return envelope( to_json( UserSchema(), user ), 'Trusted badge removed successfully.' ), HTTPStatus.OK


class Admins( SuperAdminResource ):
    """Flask-RESTful resource endpoints for the superadmin to list and create admins."""

    def get( self ):
        admins = get_all_admins()
        return envelope( UserSchema( many=True ).dump( admins ), count=len( admins ) ), HTTPStatus.OK

    def post( self ):
        admin = create_admin( request.get_json( silent=True ) )
        return envelope( to_json( UserSchema(), admin ), 'Admin created successfully.' ), HTTPStatus.CREATED


class AdminById( SuperAdminResource ):
    """Flask-RESTful resource endpoint for the superadmin to delete an admin."""

    def delete( self, admin_id ):
        delete_admin( admin_id )
        return envelope( message='Admin deleted successfully.' ), HTTPStatus.OK

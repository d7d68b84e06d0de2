"""The Resources entry point for food requests: creation, completion, cancellation and the pickup QR payload."""
from http import HTTPStatus

from flask import request
from flask_jwt_extended import jwt_required
from flask_restful import Resource

from feed_in_need.controllers.request import cancel_request
from feed_in_need.controllers.request import complete_by_code
from feed_in_need.controllers.request import complete_by_qr
from feed_in_need.controllers.request import complete_request
from feed_in_need.controllers.request import completion_summary
from feed_in_need.controllers.request import create_request
from feed_in_need.controllers.request import get_my_requests
from feed_in_need.controllers.request import get_pickup_qr_data
from feed_in_need.controllers.request import get_request
from feed_in_need.helpers.auth import AuthenticatedResource
from feed_in_need.helpers.auth import get_current_user
from feed_in_need.helpers.auth import roles_required
from feed_in_need.helpers.model_serialization import to_json
from feed_in_need.helpers.responses import envelope
from feed_in_need.schemas.request import PICKUP_CREDENTIAL_FIELDS
from feed_in_need.schemas.request import RequestSchema
# pylint: disable=too-few-public-methods
# pylint: disable=no-self-use

COMPLETED_MESSAGE = 'Pickup confirmed! Transaction completed successfully.'


def receiver_view( request_model ):
    """The request as its receiver sees it: no pickup credentials, donor contact only once approved."""

    item = to_json( RequestSchema( exclude=PICKUP_CREDENTIAL_FIELDS ), request_model )
    donation = request_model.donation
    if request_model.status in ( 'approved', 'completed' ) and donation is not None:
        donor = donation.donor
        item[ 'donor_contact' ] = {
            'name': donor.name if donor else None,
            'email': donor.email if donor else None,
            'phone': donation.donor_phone,
            'address': donation.address
        }
    elif item.get( 'donation' ) and item[ 'donation' ].get( 'donor' ):
        item[ 'donation' ][ 'donor' ].pop( 'email', None )
    return item


class Requests( Resource ):
    """Flask-RESTful resource endpoint for a receiver to request a donation."""

    method_decorators = [ roles_required( 'receiver' ), jwt_required() ]

    def post( self ):
        request_model, auto_approved, message = create_request( get_current_user(), request.get_json( silent=True ) )
        return envelope( receiver_view( request_model ), message, auto_approved=auto_approved ), HTTPStatus.CREATED


class MyRequests( Resource ):
    """Flask-RESTful resource endpoint for the receiver's own requests."""

    method_decorators = [ roles_required( 'receiver' ), jwt_required() ]

    def get( self ):
        data = [ receiver_view( request_model ) for request_model in get_my_requests( get_current_user() ) ]
        return envelope( data, count=len( data ) ), HTTPStatus.OK


class RequestById( Resource ):
    """Flask-RESTful resource endpoints for a single request: read by its receiver or an admin, cancel by its
    receiver."""

    method_decorators = {
        'get': [ jwt_required() ],
        'delete': [ roles_required( 'receiver' ), jwt_required() ]
    }

    def get( self, request_id ):
        user = get_current_user()
        request_model = get_request( request_id, user )
        if user.is_admin:
            return envelope( to_json( RequestSchema(), request_model ) ), HTTPStatus.OK
        return envelope( receiver_view( request_model ) ), HTTPStatus.OK

    def delete( self, request_id ):
        cancel_request( request_id, get_current_user() )
        return envelope( message='Request cancelled successfully.' ), HTTPStatus.OK


class CompleteRequest( Resource ):
    """Flask-RESTful resource endpoint to complete a request by ID with the confirmation code."""

    method_decorators = [ roles_required( 'receiver' ), jwt_required() ]

    def put( self, request_id ):
        request_model, certificate = complete_request(
            request_id, get_current_user(), request.get_json( silent=True )
        )
        return envelope( completion_summary( request_model, certificate ), COMPLETED_MESSAGE ), HTTPStatus.OK


class CompleteByQR( Resource ):
    """Flask-RESTful resource endpoint to complete a request from the scanned pickup QR code."""

    method_decorators = [ roles_required( 'receiver' ), jwt_required() ]

    def put( self ):
        request_model, certificate = complete_by_qr( get_current_user(), request.get_json( silent=True ) )
        return envelope( completion_summary( request_model, certificate ), COMPLETED_MESSAGE ), HTTPStatus.OK


class CompleteByCode( Resource ):
    """Flask-RESTful resource endpoint to complete a request from the confirmation code alone."""

    method_decorators = [ roles_required( 'receiver' ), jwt_required() ]

    def put( self ):
        request_model, certificate = complete_by_code( get_current_user(), request.get_json( silent=True ) )
        return envelope( completion_summary( request_model, certificate ), COMPLETED_MESSAGE ), HTTPStatus.OK


class RequestQRData( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for the donor to show the pickup QR code."""

    def get( self, request_id ):
        return envelope( get_pickup_qr_data( request_id, get_current_user() ) ), HTTPStatus.OK

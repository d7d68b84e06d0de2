"""The Resources entry point for donation certificates."""
from http import HTTPStatus

from flask import request
from flask_jwt_extended import jwt_required
from flask_restful import Resource

from feed_in_need.controllers.certificate import get_certificate
from feed_in_need.controllers.certificate import get_certificate_by_donation
from feed_in_need.controllers.certificate import get_my_certificates
from feed_in_need.controllers.certificate import get_received_certificates
from feed_in_need.controllers.certificate import get_share_urls
from feed_in_need.controllers.certificate import update_certificate_image
from feed_in_need.helpers.auth import AuthenticatedResource
from feed_in_need.helpers.auth import get_current_user
from feed_in_need.helpers.auth import roles_required
from feed_in_need.helpers.model_serialization import to_json
from feed_in_need.helpers.responses import envelope
from feed_in_need.schemas.certificate import CertificateSchema
# pylint: disable=too-few-public-methods
# pylint: disable=no-self-use


class CertificateById( Resource ):
    """Flask-RESTful resource endpoint for a public certificate."""

    def get( self, certificate_id ):
        return envelope( to_json( CertificateSchema(), get_certificate( certificate_id ) ) ), HTTPStatus.OK


class CertificateShareUrls( Resource ):
    """Flask-RESTful resource endpoint for the social share links of a certificate."""

    def get( self, certificate_id ):
        return envelope( get_share_urls( certificate_id ) ), HTTPStatus.OK


class MyCertificates( Resource ):
    """Flask-RESTful resource endpoint for the donor's certificates."""

    method_decorators = [ roles_required( 'donor' ), jwt_required() ]

    def get( self ):
        certificates = get_my_certificates( get_current_user() )
        return envelope( CertificateSchema( many=True ).dump( certificates ), count=len( certificates ) ), \
            HTTPStatus.OK


class ReceivedCertificates( Resource ):
    """Flask-RESTful resource endpoint for the certificates of donations the receiver picked up."""

    method_decorators = [ roles_required( 'receiver' ), jwt_required() ]

    def get( self ):
        certificates = get_received_certificates( get_current_user() )
        return envelope( CertificateSchema( many=True ).dump( certificates ), count=len( certificates ) ), \
            HTTPStatus.OK


class CertificateByDonation( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for the certificate of a donation."""

    def get( self, donation_id ):
        certificate = get_certificate_by_donation( donation_id, get_current_user() )
        return envelope( to_json( CertificateSchema(), certificate ) ), HTTPStatus.OK


class CertificateImage( AuthenticatedResource ):
    """Flask-RESTful resource endpoint to attach the rendered certificate image."""

    def put( self, certificate_id ):
        certificate = update_certificate_image( certificate_id, get_current_user(), request.get_json( silent=True ) )
        return envelope( to_json( CertificateSchema(), certificate ), 'Certificate image updated.' ), HTTPStatus.OK

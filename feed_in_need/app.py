"""The main application module with create_app(), resources and error handlers."""
from datetime import timedelta
import logging
from logging.config import dictConfig
import os

from flask import Flask
from flask import jsonify
from flask_restful import Api
from marshmallow.exceptions import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from configuration import config_loader
from feed_in_need.exceptions.exception_authorization import AuthorizationError
from feed_in_need.exceptions.exception_jwt import JWTError
from feed_in_need.exceptions.exception_lifecycle import LifecycleError
from feed_in_need.exceptions.exception_model import ModelError
from feed_in_need.exceptions.exception_validation import ValidationFailedError
from feed_in_need.flask_essentials import database
from feed_in_need.flask_essentials import jwt
from feed_in_need.flask_essentials import marshmallow
from feed_in_need.helpers.responses import envelope
from feed_in_need.logging_configuration import get_logging_configuration
from feed_in_need.resources.admin import AdminApproveDonation
from feed_in_need.resources.admin import AdminById
from feed_in_need.resources.admin import AdminDonations
from feed_in_need.resources.admin import AdminDonors
from feed_in_need.resources.admin import AdminMessageUser
from feed_in_need.resources.admin import AdminReceivers
from feed_in_need.resources.admin import AdminRequests
from feed_in_need.resources.admin import AdminReviewRequest
from feed_in_need.resources.admin import AdminUserById
from feed_in_need.resources.admin import AdminUsers
from feed_in_need.resources.admin import AdminUserTrust
from feed_in_need.resources.admin import AdminVerifyDonor
from feed_in_need.resources.admin import AdminVerifyReceiver
from feed_in_need.resources.admin import Admins
from feed_in_need.resources.admin import DashboardStats
from feed_in_need.resources.app_health import Heartbeat
from feed_in_need.resources.certificate import CertificateByDonation
from feed_in_need.resources.certificate import CertificateById
from feed_in_need.resources.certificate import CertificateImage
from feed_in_need.resources.certificate import CertificateShareUrls
from feed_in_need.resources.certificate import MyCertificates
from feed_in_need.resources.certificate import ReceivedCertificates
from feed_in_need.resources.donation import CancelDonation
from feed_in_need.resources.donation import DonationApprovedRequest
from feed_in_need.resources.donation import DonationById
from feed_in_need.resources.donation import Donations
from feed_in_need.resources.donation import MyDonations
from feed_in_need.resources.donation import NearbyDonations
from feed_in_need.resources.notification import MessageById
from feed_in_need.resources.notification import Messages
from feed_in_need.resources.notification import NotificationRead
from feed_in_need.resources.notification import Notifications
from feed_in_need.resources.notification import NotificationsReadAll
from feed_in_need.resources.rating import CanRate
from feed_in_need.resources.rating import MyRatingStats
from feed_in_need.resources.rating import Ratings
from feed_in_need.resources.rating import UserRatings
from feed_in_need.resources.request import CompleteByCode
from feed_in_need.resources.request import CompleteByQR
from feed_in_need.resources.request import CompleteRequest
from feed_in_need.resources.request import MyRequests
from feed_in_need.resources.request import RequestById
from feed_in_need.resources.request import RequestQRData
from feed_in_need.resources.request import Requests
from feed_in_need.resources.user import ChangePassword
from feed_in_need.resources.user import Login
from feed_in_need.resources.user import Me
from feed_in_need.resources.user import Register
from feed_in_need.resources.user import RequestReverification
from feed_in_need.resources.user import ResendVerification
from feed_in_need.resources.user import VerifyEmail
# pylint: disable=too-many-locals
# pylint: disable=too-many-statements

GENERIC_SERVER_ERROR = 'Server error.'


def create_app( app_config_env=None ):
    """Application factory.

    Builds the Feed In Need API for one configuration section of conf.yml (DEV, TEST, PROD), layers the
    FEED_IN_NEED_ environment variables on top, sets up logging, and registers the error handlers and routes.

    :param str app_config_env: The configuration name to use in loading the configuration variables.
    :return: The Flask application.
    """

    # APP_ENV picks the section when no name is passed.
    if not app_config_env:
        app_config_env = os.environ.get( 'APP_ENV', 'DEFAULT' )

    app = Flask( 'feed_in_need_api' )

    configuration = config_loader.ConfigLoader()
    configuration.update_from_yaml_file(
        os.path.join( os.path.dirname( config_loader.__file__ ), 'conf.yml' ), app_config_env
    )
    configuration.update_from_env_variables( app_config_env )

    app.config.update( configuration )
    app.config.update( { 'ENV': app_config_env } )
    app.config.update(
        JWT_ACCESS_TOKEN_EXPIRES=timedelta( seconds=int( app.config[ 'JWT_ACCESS_TOKEN_EXPIRES_SECONDS' ] ) )
    )

    wsgi_log_level = app.config.get( 'WSGI_LOG_LEVEL' ) or 'WARNING'
    gunicorn_log_level = app.config.get( 'GUNICORN_LOG_LEVEL' ) or 'WARNING'

    # If running gunicorn add gunicorn.error to handlers.
    gunicorn = 'gunicorn' in os.environ.get( 'SERVER_SOFTWARE', '' )

    dictConfig( get_logging_configuration( wsgi_log_level, gunicorn_log_level, gunicorn ) )
    logging.root.log( logging.root.level, '***** Logging is enabled for this level.' )
    logging.root.log( logging.root.level, '***** app.config[ ENV ]: %s', app_config_env )

    database.init_app( app )
    marshmallow.init_app( app )
    jwt.init_app( app )
    # Errors raised inside resources reach the handlers below.
    app.config.update( PROPAGATE_EXCEPTIONS=True )

    api = Api( app )

    api.add_resource( Heartbeat, '/api/heartbeat' )

    api.add_resource( Register, '/api/auth/register' )
    api.add_resource( VerifyEmail, '/api/auth/verify-email' )
    api.add_resource( ResendVerification, '/api/auth/resend-verification' )
    api.add_resource( Login, '/api/auth/login' )
    api.add_resource( Me, '/api/auth/me' )
    api.add_resource( ChangePassword, '/api/auth/change-password' )
    api.add_resource( RequestReverification, '/api/auth/request-reverification' )

    api.add_resource( Donations, '/api/donations' )
    api.add_resource( NearbyDonations, '/api/donations/nearby' )
    api.add_resource( MyDonations, '/api/donations/my' )
    api.add_resource( DonationById, '/api/donations/<int:donation_id>' )
    api.add_resource( CancelDonation, '/api/donations/<int:donation_id>/cancel' )
    api.add_resource( DonationApprovedRequest, '/api/donations/<int:donation_id>/approved-request' )

    api.add_resource( Requests, '/api/requests' )
    api.add_resource( MyRequests, '/api/requests/my' )
    api.add_resource( CompleteByQR, '/api/requests/complete-qr' )
    api.add_resource( CompleteByCode, '/api/requests/complete-by-code' )
    api.add_resource( RequestById, '/api/requests/<int:request_id>' )
    api.add_resource( CompleteRequest, '/api/requests/<int:request_id>/complete' )
    api.add_resource( RequestQRData, '/api/requests/<int:request_id>/qr-data' )

    api.add_resource( Ratings, '/api/ratings' )
    api.add_resource( UserRatings, '/api/ratings/user/<int:user_id>' )
    api.add_resource( CanRate, '/api/ratings/can-rate/<int:request_id>' )
    api.add_resource( MyRatingStats, '/api/ratings/my-stats' )

    api.add_resource( CertificateById, '/api/certificates/id/<string:certificate_id>' )
    api.add_resource( CertificateShareUrls, '/api/certificates/<string:certificate_id>/share-urls' )
    api.add_resource( MyCertificates, '/api/certificates/my' )
    api.add_resource( ReceivedCertificates, '/api/certificates/received' )
    api.add_resource( CertificateByDonation, '/api/certificates/donation/<int:donation_id>' )
    api.add_resource( CertificateImage, '/api/certificates/<string:certificate_id>/image' )

    api.add_resource( Notifications, '/api/notifications' )
    api.add_resource( NotificationRead, '/api/notifications/<int:notification_id>/read' )
    api.add_resource( NotificationsReadAll, '/api/notifications/read-all' )
    api.add_resource( Messages, '/api/messages' )
    api.add_resource( MessageById, '/api/messages/<int:message_id>' )

    api.add_resource( DashboardStats, '/api/admin/stats' )
    api.add_resource( AdminDonations, '/api/admin/donations' )
    api.add_resource( AdminApproveDonation, '/api/admin/donations/<int:donation_id>/approve' )
    api.add_resource( AdminRequests, '/api/admin/requests' )
    api.add_resource( AdminReviewRequest, '/api/admin/requests/<int:request_id>' )
    api.add_resource( AdminReceivers, '/api/admin/receivers' )
    api.add_resource( AdminVerifyReceiver, '/api/admin/receivers/<int:user_id>/verify' )
    api.add_resource( AdminDonors, '/api/admin/donors' )
    api.add_resource( AdminVerifyDonor, '/api/admin/donors/<int:user_id>/verify' )
    api.add_resource( AdminUsers, '/api/admin/users' )
    api.add_resource( AdminUserById, '/api/admin/users/<int:user_id>' )
    api.add_resource( AdminMessageUser, '/api/admin/users/<int:user_id>/message' )
    api.add_resource( AdminUserTrust, '/api/admin/users/<int:user_id>/trust' )
    api.add_resource( Admins, '/api/admin/admins' )
    api.add_resource( AdminById, '/api/admin/admins/<int:admin_id>' )

    @app.after_request
    def after_request( response ):  # pylint: disable=unused-variable
        """A handler for defining response headers.

        :param response: an HTTP response object
        :return:
        """

        response.headers.add( 'Access-Control-Allow-Origin', '*' )
        response.headers.add( 'Access-Control-Allow-Headers', 'Content-Type, Authorization' )
        response.headers.add( 'Access-Control-Allow-Methods', 'GET, PUT, POST, DELETE' )
        response.headers.add( 'Access-Control-Expose-Headers', 'Link' )
        return response

    def jwt_error_response( message ):
        response = jsonify( envelope( message=message, success=False ) )
        response.status_code = 401
        return response

    @jwt.unauthorized_loader
    def handle_missing_token( reason ):  # pylint: disable=unused-variable
        logging.info( 'Missing token: %s', reason )
        return jwt_error_response( 'Access denied. No token provided.' )

    @jwt.invalid_token_loader
    def handle_invalid_token( reason ):  # pylint: disable=unused-variable
        logging.info( 'Invalid token: %s', reason )
        return jwt_error_response( 'Invalid token.' )

    @jwt.expired_token_loader
    def handle_expired_token( jwt_header, jwt_payload ):  # pylint: disable=unused-variable,unused-argument
        return jwt_error_response( 'Token expired.' )

    @jwt.revoked_token_loader
    def handle_revoked_token( jwt_header, jwt_payload ):  # pylint: disable=unused-variable,unused-argument
        return jwt_error_response( 'Token revoked.' )

    @jwt.user_lookup_error_loader
    def handle_user_lookup_error( jwt_header, jwt_payload ):  # pylint: disable=unused-variable,unused-argument
        return jwt_error_response( 'User not found.' )

    @app.errorhandler( ValidationFailedError )
    def handle_400( error ):  # pylint: disable=unused-variable
        """HTTP status 400 ( bad request ) error handler.

         :param error: Error message raised by exception.
         :return:
         """

        response = jsonify( envelope( message=handle_error_message( error ), success=False ) )
        response.status_code = 400
        return response

    @app.errorhandler( MarshmallowValidationError )
    def handle_400_schema( error ):  # pylint: disable=unused-variable
        """HTTP status 400 ( bad request ) error handler for payloads rejected by a schema.

         :param error: The marshmallow ValidationError, whose messages are returned per field.
         :return:
         """

        logging.info( 'Payload validation failed: %s', error.messages )
        response = jsonify( envelope( message=first_schema_message( error.messages ), success=False,
                                      errors=error.messages ) )
        response.status_code = 400
        return response

    @app.errorhandler( JWTError )
    def handle_401( error ):  # pylint: disable=unused-variable
        """HTTP status 401 ( unauthorized ) error handler.

         :param error: Error message raised by exception.
         :return:
         """

        response = jsonify( envelope( message=handle_error_message( error ), success=False ) )
        response.status_code = 401
        return response

    @app.errorhandler( AuthorizationError )
    def handle_403( error ):  # pylint: disable=unused-variable
        """HTTP status 403 ( forbidden ) error handler.

         :param error: Error message raised by exception.
         :return:
         """

        response = jsonify( envelope( message=handle_error_message( error ), success=False ) )
        response.status_code = 403
        return response

    @app.errorhandler( ModelError )
    def handle_404( error ):  # pylint: disable=unused-variable
        """HTTP status 404 ( not found ) error handler.

        :param error: Error message raised by exception.
        :return:
        """

        response = jsonify( envelope( message=handle_error_message( error ), success=False ) )
        response.status_code = 404
        return response

    @app.errorhandler( LifecycleError )
    def handle_409( error ):  # pylint: disable=unused-variable
        """HTTP status 409 ( conflict ) error handler.

        :param error: Error message raised by exception.
        :return:
        """

        response = jsonify( envelope( message=handle_error_message( error ), success=False ) )
        response.status_code = 409
        return response

    @app.errorhandler( IntegrityError )
    def handle_409_integrity( error ):  # pylint: disable=unused-variable
        """HTTP status 409 ( conflict ) for a unique constraint lost to a concurrent write.

        :param error: The IntegrityError raised by the database.
        :return:
        """

        logging.exception( error )
        database.session.rollback()
        response = jsonify( envelope( message='Conflicting data: the record already exists.', success=False ) )
        response.status_code = 409
        return response

    @app.errorhandler( SQLAlchemyError )
    @app.errorhandler( Exception )
    def handle_500( error ):  # pylint: disable=unused-variable
        """HTTP status 500 ( internal server error ) error handler.

        Werkzeug HTTP exceptions, e.g. an unknown route or method, keep their own status code.

        :param error: Error message raised by exception.
        :return:
        """

        if isinstance( error, HTTPException ):
            response = jsonify( envelope( message=error.description, success=False ) )
            response.status_code = error.code
            return response

        logging.exception( error )
        if isinstance( error, SQLAlchemyError ):
            database.session.rollback()
        message = str( error ) if app.config.get( 'DEBUG' ) else GENERIC_SERVER_ERROR
        response = jsonify( envelope( message=message, success=False ) )
        response.status_code = 500
        return response

    def handle_error_message( error ):
        """Used by error handlers for handling error and error.message.

        :param error: The error raised by the exception.
        :return: return the error message.
        """

        if hasattr( error, 'message' ) and error.message:
            logging.info( error.message )
            return error.message
        logging.info( error.args )
        return ' '.join( str( arg ) for arg in error.args ) or error.__class__.__name__

    return app


def first_schema_message( messages ):
    """Flatten the first marshmallow error into a single sentence, e.g. 'rating: Must be between 1 and 5.'"""

    if isinstance( messages, dict ):
        for field, field_messages in messages.items():
            inner = first_schema_message( field_messages )
            return '{}: {}'.format( field, inner ) if field != '_schema' else inner
    if isinstance( messages, list ) and messages:
        return first_schema_message( messages[ 0 ] )
    return str( messages ) if messages else 'Validation failed.'


feed_app = create_app()  # pylint: disable=invalid-name

if 'gunicorn' in os.environ.get( 'SERVER_SOFTWARE', '' ):
    gunicorn_logger = logging.getLogger( 'gunicorn.error' )  # pylint: disable=invalid-name
    feed_app.logger.handlers = gunicorn_logger.handlers
    feed_app.logger.setLevel( gunicorn_logger.level )

if __name__ == '__main__':
    feed_app.run( host='127.0.0.1', port=5000, debug=True )

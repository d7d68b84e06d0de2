"""The Resources entry point for registration, email verification, login and the caller's profile."""
from http import HTTPStatus

from flask import request
from flask_restful import Resource

from feed_in_need.controllers.user import change_password
from feed_in_need.controllers.user import get_me
from feed_in_need.controllers.user import login
from feed_in_need.controllers.user import register_user
from feed_in_need.controllers.user import request_reverification
from feed_in_need.controllers.user import resend_verification_code
from feed_in_need.controllers.user import update_profile
from feed_in_need.controllers.user import verify_email
from feed_in_need.helpers.auth import AuthenticatedResource
from feed_in_need.helpers.auth import get_current_user
from feed_in_need.helpers.model_serialization import to_json
from feed_in_need.helpers.responses import envelope
from feed_in_need.schemas.user import UserSchema
# pylint: disable=too-few-public-methods
# pylint: disable=no-self-use


class Register( Resource ):
    """Flask-RESTful resource endpoint to register a donor or a receiver."""

    def post( self ):
        user = register_user( request.get_json( silent=True ) )
        return envelope(
            to_json( UserSchema(), user ),
            'Registration successful. Please check your email for the verification code.'
        ), HTTPStatus.CREATED


class VerifyEmail( Resource ):
    """Flask-RESTful resource endpoint to confirm the emailed verification code."""

    def post( self ):
        user = verify_email( request.get_json( silent=True ) )
        return envelope( to_json( UserSchema(), user ), 'Email verified successfully.' ), HTTPStatus.OK


class ResendVerification( Resource ):
    """Flask-RESTful resource endpoint to email a fresh verification code."""

    def post( self ):
        resend_verification_code( request.get_json( silent=True ) )
        return envelope( message='Verification code sent to your email.' ), HTTPStatus.OK


class Login( Resource ):
    """Flask-RESTful resource endpoint to exchange credentials for an access token."""

    def post( self ):
        token, user = login( request.get_json( silent=True ) )
        return envelope( { 'token': token, 'user': to_json( UserSchema(), user ) } ), HTTPStatus.OK


class Me( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for the caller's own account."""

    def get( self ):
        user = get_me( get_current_user() )
        return envelope( to_json( UserSchema(), user ) ), HTTPStatus.OK

    def put( self ):
        user = update_profile( get_current_user(), request.get_json( silent=True ) )
        return envelope( to_json( UserSchema(), user ), 'Profile updated successfully.' ), HTTPStatus.OK


class ChangePassword( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for the caller to change their password. Answers with a fresh token."""

    def put( self ):
        token = change_password( get_current_user(), request.get_json( silent=True ) )
        return envelope( { 'token': token }, 'Password changed successfully.' ), HTTPStatus.OK


class RequestReverification( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for a rejected donor or receiver to ask for another review."""

    def post( self ):
        user = request_reverification( get_current_user() )
        return envelope(
            { 'verification_status': user.verification_status },
            'Re-verification request submitted successfully. An admin will review your profile shortly.'
        ), HTTPStatus.OK

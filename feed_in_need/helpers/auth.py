"""Authentication and role checks on top of flask-jwt-extended.

Access tokens carry the user ID as the identity and the role as an additional claim. The role is always re-read from
the database, so a demoted or deleted user loses access at once.

The Flask-RESTful base classes apply the decorators through method_decorators. Flask-RESTful wraps the method with
each decorator in turn, so the last entry is outermost and the JWT check runs before the role check.
"""
from functools import wraps

from flask_jwt_extended import create_access_token
from flask_jwt_extended import get_jwt_identity
from flask_jwt_extended import jwt_required
from flask_jwt_extended import verify_jwt_in_request
from flask_restful import Resource

from feed_in_need.exceptions.exception_authorization import RoleNotAuthorizedError
from feed_in_need.exceptions.exception_jwt import JWTRequestError
from feed_in_need.flask_essentials import database
from feed_in_need.models.user import UserModel


def issue_access_token( user ):
    """Create the access token for a user on login."""
    return create_access_token( identity=str( user.id ), additional_claims={ 'role': user.role } )


def _load_user( identity ):
    if identity is None:
        return None
    try:
        user_id = int( identity )
    except ( TypeError, ValueError ):
        return None
    return database.session.get( UserModel, user_id )


def get_current_user():
    """The UserModel of the JWT in the current request.

    :return: UserModel
    :raises JWTRequestError: The identity does not resolve to an existing user.
    """

    user = _load_user( get_jwt_identity() )
    if not user:
        raise JWTRequestError()
    return user


def get_optional_user():
    """The UserModel of the JWT if the request carries one, otherwise None."""

    verify_jwt_in_request( optional=True )
    return _load_user( get_jwt_identity() )


def role_admits( role, roles ):
    """True if role is in roles. The superadmin passes any check that admits admin."""

    if role in roles:
        return True
    return role == 'superadmin' and 'admin' in roles


def roles_required( *roles ):
    """Decorator limiting a view to the given roles. Expects a verified JWT.

    :param roles: The role names allowed.
    :return: The decorator.
    """

    def decorator( function ):
        @wraps( function )
        def wrapper( *args, **kwargs ):
            user = get_current_user()
            if not role_admits( user.role, roles ):
                raise RoleNotAuthorizedError( user.role )
            return function( *args, **kwargs )
        return wrapper
    return decorator


class AuthenticatedResource( Resource ):
    """Any logged in user."""

    method_decorators = [ jwt_required() ]


class AdminResource( Resource ):
    """Admins and the superadmin."""

    method_decorators = [ roles_required( 'admin' ), jwt_required() ]


class SuperAdminResource( Resource ):
    """The superadmin only."""

    method_decorators = [ roles_required( 'superadmin' ), jwt_required() ]

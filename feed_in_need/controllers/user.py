"""Controllers for Flask-RESTful resources: the identity store, registration, email verification, login and profile.

The lookup and counter functions are also the identity store used by the donation, request and rating controllers.
They never commit: the caller owns the transaction.
"""
import logging
from datetime import datetime
from datetime import timedelta

from flask import current_app

from feed_in_need.exceptions.exception_authorization import EmailNotVerifiedError
from feed_in_need.exceptions.exception_authorization import ReverificationNotAllowedError
from feed_in_need.exceptions.exception_jwt import IncorrectPasswordError
from feed_in_need.exceptions.exception_jwt import InvalidCredentialsError
from feed_in_need.exceptions.exception_lifecycle import UserAlreadyExistsError
from feed_in_need.exceptions.exception_model import ModelUserNotFoundError
from feed_in_need.exceptions.exception_validation import AccountAlreadyVerifiedError
from feed_in_need.exceptions.exception_validation import EmailAlreadyVerifiedError
from feed_in_need.exceptions.exception_validation import InvalidEmailVerificationCodeError
from feed_in_need.exceptions.exception_validation import ValidationFailedError
from feed_in_need.flask_essentials import database
from feed_in_need.helpers.auth import issue_access_token
from feed_in_need.helpers.email import send_admin_email
from feed_in_need.helpers.email import send_templated_email
from feed_in_need.helpers.post_commit import PostCommitHooks
from feed_in_need.helpers.validation import load_payload
from feed_in_need.models.user import UserModel
from feed_in_need.schemas.user import ChangePasswordPayloadSchema
from feed_in_need.schemas.user import LoginPayloadSchema
from feed_in_need.schemas.user import ProfilePayloadSchema
from feed_in_need.schemas.user import RegisterPayloadSchema
from feed_in_need.schemas.user import ResendVerificationPayloadSchema
from feed_in_need.schemas.user import VerifyEmailPayloadSchema

COUNTER_FIELDS = ( 'successful_donations', 'successful_receives', 'total_ratings' )
PROTECTED_FIELDS = ( 'id', 'password_hash', 'created_at' )


def find_user_by_id( user_id ):
    return database.session.get( UserModel, user_id )


def find_user_by_email( email ):
    if not email:
        return None
    return UserModel.query.filter_by( email=email.strip().lower() ).first()


def get_user_or_404( user_id ):
    user = find_user_by_id( user_id )
    if not user:
        raise ModelUserNotFoundError()
    return user


def update_user( user_id, partial ):
    """Set the given columns on a user.

    :param int user_id: The user ID.
    :param dict partial: Column names and values. The ID and password hash cannot be set this way.
    :return: The UserModel.
    """

    user = get_user_or_404( user_id )
    columns = UserModel.__table__.columns.keys()
    for key, value in partial.items():
        if key not in columns or key in PROTECTED_FIELDS:
            raise ValidationFailedError( 'Cannot update user field {}.'.format( key ) )
        setattr( user, key, value )
    return user


def increment_counter( user_id, field, amount=1 ):
    """Atomically increment a counter column in SQL, so concurrent increments are not lost.

    :param int user_id: The user ID.
    :param str field: One of COUNTER_FIELDS.
    :param int amount: The increment.
    :return: The number of rows updated, 0 when the user no longer exists.
    """

    if field not in COUNTER_FIELDS:
        raise ValueError( 'Not a counter field: {}'.format( field ) )

    column = getattr( UserModel, field )
    updated = UserModel.query.filter( UserModel.id == user_id ).update(
        { column: column + amount }, synchronize_session='fetch'
    )
    if not updated:
        logging.warning( 'Counter %s not incremented: user %s not found.', field, user_id )
    return updated


def register_user( payload ):
    """Register a donor or a receiver.

    The account starts with an unverified email address and a pending verification status. A 4 digit code is emailed
    to the user. A new receiver also triggers a verification request email to the admin.

    :param dict payload: The registration body.
    :return: The UserModel.
    """

    data = load_payload( RegisterPayloadSchema(), payload )
    email = data[ 'email' ].strip().lower()
    if find_user_by_email( email ):
        raise UserAlreadyExistsError()

    user = UserModel(
        name=data[ 'name' ].strip(),
        email=email,
        phone=data[ 'phone' ],
        role=data[ 'role' ],
        donor_type=data[ 'donor_type' ] if data[ 'role' ] == 'donor' else None,
        receiver_type=data[ 'receiver_type' ] if data[ 'role' ] == 'receiver' else None,
        address=data[ 'address' ],
        verification_status='pending',
        is_email_verified=False
    )
    user.set_password( data[ 'password' ] )
    code = user.generate_verification_code( current_app.config.get( 'EMAIL_VERIFICATION_MINUTES', 10 ) )

    database.session.add( user )
    database.session.commit()

    hooks = PostCommitHooks()
    hooks.add( 'verification_email', send_templated_email, 'email_verification', user.email, {
        'name': user.name, 'code': code
    } )
    if user.role == 'receiver':
        hooks.add( 'admin_email', send_admin_email, 'receiver_verification_request', {
            'user_id': user.id,
            'name': user.name,
            'email': user.email,
            'phone': user.phone,
            'receiver_type': user.receiver_type,
            'address': user.address
        } )
    hooks.run()

    logging.info( 'Registered %s %s.', user.role, user.id )
    return user


def verify_email( payload ):
    """Confirm the emailed code and mark the address verified.

    :param dict payload: { email, code }
    :return: The UserModel.
    """

    data = load_payload( VerifyEmailPayloadSchema(), payload )
    user = find_user_by_email( data[ 'email' ] )
    if not user:
        raise ModelUserNotFoundError()
    if user.is_email_verified:
        return user

    expired = not user.email_verification_expires or user.email_verification_expires < datetime.utcnow()
    if expired or user.email_verification_code != data[ 'code' ].strip():
        raise InvalidEmailVerificationCodeError()

    user.is_email_verified = True
    user.email_verification_code = None
    user.email_verification_expires = None
    database.session.commit()
    return user


def resend_verification_code( payload ):
    """Replace the email verification code with a fresh one and email it.

    :param dict payload: { email }
    :return: The UserModel.
    """

    data = load_payload( ResendVerificationPayloadSchema(), payload )
    user = find_user_by_email( data[ 'email' ] )
    if not user:
        raise ModelUserNotFoundError()
    if user.is_email_verified:
        raise EmailAlreadyVerifiedError()

    code = user.generate_verification_code( current_app.config.get( 'EMAIL_VERIFICATION_MINUTES', 10 ) )
    database.session.commit()

    hooks = PostCommitHooks()
    hooks.add( 'verification_email', send_templated_email, 'email_verification', user.email, {
        'name': user.name, 'code': code
    } )
    hooks.run()
    return user


def login( payload ):
    """Check the credentials and issue an access token.

    :param dict payload: { email, password }
    :return: ( access token, UserModel )
    """

    data = load_payload( LoginPayloadSchema(), payload )
    user = find_user_by_email( data[ 'email' ] )
    if not user or not user.check_password( data[ 'password' ] ):
        raise InvalidCredentialsError()
    if not user.is_email_verified:
        raise EmailNotVerifiedError()

    return issue_access_token( user ), user


def get_me( user ):
    return user


def update_profile( user, payload ):
    """The caller edits their name, phone or address. Email, role and verification are not editable here.

    :param UserModel user: The caller.
    :param dict payload: Any of { name, phone, address }.
    :return: The UserModel.
    """

    data = load_payload( ProfilePayloadSchema(), payload )
    if 'name' in data:
        data[ 'name' ] = data[ 'name' ].strip()
        if not data[ 'name' ]:
            raise ValidationFailedError( 'Name cannot be empty.' )
    user = update_user( user.id, data )
    database.session.commit()
    return user


def change_password( user, payload ):
    """Check the current password, store the new one and issue a fresh access token.

    :param UserModel user: The caller.
    :param dict payload: { current_password, new_password }
    :return: The access token.
    """

    data = load_payload( ChangePasswordPayloadSchema(), payload )
    if not user.check_password( data[ 'current_password' ] ):
        raise IncorrectPasswordError()

    user.set_password( data[ 'new_password' ] )
    database.session.commit()
    logging.info( 'User %s changed their password.', user.id )
    return issue_access_token( user )


def request_reverification( user ):
    """A rejected donor or receiver, having fixed the profile, asks the admins to look again.

    The account goes back to pending and the previous rejection is cleared. The admin is emailed.

    :param UserModel user: The caller.
    :return: The UserModel.
    """

    if user.role not in ( 'donor', 'receiver' ):
        raise ReverificationNotAllowedError()
    if user.verification_status == 'approved':
        raise AccountAlreadyVerifiedError()

    user = update_user( user.id, {
        'verification_status': 'pending',
        'rejection_reason': None,
        'rejected_at': None,
        'rejected_by_id': None,
        'verified_at': None
    } )
    database.session.commit()

    hooks = PostCommitHooks()
    hooks.add( 'admin_email', send_admin_email, '{}_verification_request'.format( user.role ), {
        'user_id': user.id,
        'name': user.name,
        'email': user.email,
        'phone': user.phone,
        'address': user.address,
        'reverification': True
    } )
    hooks.run()

    logging.info( '%s %s asked for re-verification.', user.role.capitalize(), user.id )
    return user


def cleanup_unverified_users( hours_old=None, now=None ):
    """Delete accounts whose email was never verified and that are older than hours_old.

    :param int hours_old: The age cutoff, defaults to UNVERIFIED_USER_MAX_AGE_HOURS.
    :param datetime now: The reference time, defaults to utcnow.
    :return: The number of accounts deleted.
    """

    if hours_old is None:
        hours_old = current_app.config.get( 'UNVERIFIED_USER_MAX_AGE_HOURS', 24 )
    cutoff = ( now or datetime.utcnow() ) - timedelta( hours=int( hours_old ) )

    deleted = UserModel.query.filter(
        UserModel.is_email_verified.is_( False ),
        UserModel.role.in_( ( 'donor', 'receiver' ) ),
        UserModel.created_at < cutoff
    ).delete( synchronize_session=False )
    database.session.commit()

    logging.info( 'Deleted %s unverified accounts older than %s hours.', deleted, hours_old )
    return deleted

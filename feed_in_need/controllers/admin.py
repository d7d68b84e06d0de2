"""Controllers for Flask-RESTful resources: administration of users and the dashboard.

Admins verify donors and receivers and remove accounts. The superadmin manages the admins. A superadmin account can
never be deleted through the API, and only the superadmin deletes admins.
"""
import logging
from datetime import datetime

from sqlalchemy import func

from feed_in_need.controllers.user import find_user_by_email
from feed_in_need.controllers.user import get_user_or_404
from feed_in_need.exceptions.exception_authorization import ProtectedUserError
from feed_in_need.exceptions.exception_lifecycle import UserAlreadyExistsError
from feed_in_need.exceptions.exception_lifecycle import UserRoleMismatchError
from feed_in_need.exceptions.exception_validation import ValidationFailedError
from feed_in_need.flask_essentials import database
from feed_in_need.helpers.email import send_templated_email
from feed_in_need.helpers.manage_paginate import convert_into_page
from feed_in_need.helpers.notification import notify
from feed_in_need.helpers.post_commit import PostCommitHooks
from feed_in_need.helpers.validation import load_payload
from feed_in_need.helpers.validation import require_reason
from feed_in_need.models.donation import DonationModel
from feed_in_need.models.request import RequestModel
from feed_in_need.models.user import UserModel
from feed_in_need.schemas.user import AdminPayloadSchema
from feed_in_need.schemas.user import VerifyUserPayloadSchema


def _count_by( column, model ):
    return dict( database.session.query( column, func.count( model.id ) ).group_by( column ).all() )


def get_dashboard_stats():
    """Counts of users, donations and requests for the admin dashboard."""

    users_by_role = _count_by( UserModel.role, UserModel )
    donations_by_status = _count_by( DonationModel.status, DonationModel )
    requests_by_status = _count_by( RequestModel.status, RequestModel )

    return {
        'users': {
            'donors': users_by_role.get( 'donor', 0 ),
            'receivers': users_by_role.get( 'receiver', 0 ),
            'admins': users_by_role.get( 'admin', 0 ),
            'pending_receivers': UserModel.query.filter_by(
                role='receiver', verification_status='pending'
            ).count(),
            'trusted': UserModel.query.filter( UserModel.is_trusted.is_( True ) ).count()
        },
        'donations': {
            'total': sum( donations_by_status.values() ),
            'pending_approval': DonationModel.query.filter( DonationModel.is_approved.is_( False ) ).count(),
            'by_status': donations_by_status
        },
        'requests': {
            'total': sum( requests_by_status.values() ),
            'pending': requests_by_status.get( 'pending', 0 ),
            'by_status': requests_by_status
        }
    }


def verify_user( user_id, admin, role, payload ):
    """Approve or reject a donor or a receiver. A rejection needs a reason.

    :param int user_id: The user to verify.
    :param UserModel admin: The caller.
    :param str role: 'receiver' or 'donor', from the endpoint.
    :param dict payload: { status: approved | rejected, rejection_reason }
    :return: The UserModel.
    """

    data = load_payload( VerifyUserPayloadSchema(), payload )
    status = data[ 'status' ]
    reason = None
    if status == 'rejected':
        reason = require_reason( data.get( 'rejection_reason' ), 1, 'Rejection reason is required.' )

    user = get_user_or_404( user_id )
    if user.role != role:
        raise UserRoleMismatchError( role )

    now = datetime.utcnow()
    user.verification_status = status
    if status == 'approved':
        user.verified_at = now
        user.rejection_reason = None
        user.rejected_at = None
        user.rejected_by_id = None
    else:
        user.rejection_reason = reason
        user.rejected_at = now
        user.rejected_by_id = admin.id
    database.session.commit()

    hooks = PostCommitHooks()
    if status == 'approved':
        hooks.add(
            'notification', notify, user.id, 'verification_approved', 'Account Verified',
            'Your account has been verified. You now have full access to Feed In Need.'
        )
    else:
        hooks.add(
            'notification', notify, user.id, 'verification_rejected', 'Verification Rejected',
            'Your account verification was rejected. Reason: {}'.format( reason )
        )
    hooks.add( 'email', send_templated_email, 'verification_result', user.email, {
        'name': user.name, 'status': status, 'reason': reason
    } )
    hooks.run()

    logging.info( '%s %s %s by admin %s.', role.capitalize(), user.id, status, admin.id )
    return user


def get_users_by_role( role, verification_status, page, per_page ):
    """Users of a role, optionally filtered by verification status, newest first.

    :return: A Pagination object.
    """

    query = UserModel.query
    if role:
        query = query.filter( UserModel.role == role )
    if verification_status:
        query = query.filter( UserModel.verification_status == verification_status )
    return convert_into_page( query.order_by( UserModel.created_at.desc() ), page, per_page )


def get_user_by_id( user_id ):
    return get_user_or_404( user_id )


def delete_user( user_id, admin ):
    """Hard delete a user. Their donations, requests and ratings remain."""

    user = get_user_or_404( user_id )
    if user.role == 'superadmin':
        raise ProtectedUserError( 'Cannot delete the superadmin.' )
    if user.role == 'admin' and admin.role != 'superadmin':
        raise ProtectedUserError( 'Only superadmin can delete admins.' )

    database.session.delete( user )
    database.session.commit()
    logging.info( 'User %s deleted by %s %s.', user_id, admin.role, admin.id )
    return True


def get_all_admins():
    return UserModel.query.filter( UserModel.role == 'admin' ).order_by( UserModel.created_at.desc() ).all()


def create_admin( payload ):
    """The superadmin creates an admin account, verified and ready to log in."""

    data = load_payload( AdminPayloadSchema(), payload )
    email = data[ 'email' ].strip().lower()
    if find_user_by_email( email ):
        raise UserAlreadyExistsError()

    admin = UserModel(
        name=data[ 'name' ].strip(),
        email=email,
        phone=data.get( 'phone' ),
        role='admin',
        verification_status='approved',
        verified_at=datetime.utcnow(),
        is_email_verified=True
    )
    admin.set_password( data[ 'password' ] )
    database.session.add( admin )
    database.session.commit()
    logging.info( 'Admin %s created.', admin.id )
    return admin


def delete_admin( admin_id ):
    admin = get_user_or_404( admin_id )
    if admin.role != 'admin':
        raise ValidationFailedError( 'User is not an admin.' )

    database.session.delete( admin )
    database.session.commit()
    return True

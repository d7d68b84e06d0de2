"""Controllers for Flask-RESTful resources: inbox messages sent by admins to users."""
import logging
from datetime import datetime

from feed_in_need.controllers.user import get_user_or_404
from feed_in_need.exceptions.exception_model import ModelMessageNotFoundError
from feed_in_need.flask_essentials import database
from feed_in_need.helpers.email import send_templated_email
from feed_in_need.helpers.manage_paginate import convert_into_page
from feed_in_need.helpers.notification import notify
from feed_in_need.helpers.post_commit import PostCommitHooks
from feed_in_need.helpers.validation import load_payload
from feed_in_need.models.notification import MessageModel
from feed_in_need.schemas.notification import MessagePayloadSchema


def send_message_to_user( user_id, admin, payload ):
    """Store an inbox message for the user, then email and notify them.

    :param int user_id: The recipient.
    :param UserModel admin: The sender.
    :param dict payload: { subject, message, action_required }
    :return: ( MessageModel, email result )
    """

    data = load_payload( MessagePayloadSchema(), payload )
    recipient = get_user_or_404( user_id )

    message = MessageModel(
        recipient_id=recipient.id,
        sender_id=admin.id,
        subject=data[ 'subject' ].strip(),
        message=data[ 'message' ].strip(),
        action_required=data.get( 'action_required' )
    )
    database.session.add( message )
    database.session.commit()

    hooks = PostCommitHooks()
    hooks.add( 'email', send_templated_email, 'admin_message', recipient.email, {
        'name': recipient.name,
        'subject': message.subject,
        'message': message.message,
        'action_required': message.action_required
    } )
    hooks.add(
        'notification', notify, recipient.id, 'admin_message', 'New Message from Admin', message.subject,
        link='/messages', data={ 'message_id': message.id }
    )
    results = hooks.run()

    logging.info( 'Admin %s sent message %s to user %s.', admin.id, message.id, recipient.id )
    return message, results[ 'email' ]


def get_my_messages( user, unread_only, page, per_page ):
    """The user's inbox, newest first.

    :return: ( Pagination, unread count )
    """

    query = MessageModel.query.filter_by( recipient_id=user.id )
    if unread_only:
        query = query.filter( MessageModel.is_read.is_( False ) )
    pagination = convert_into_page(
        query.order_by( MessageModel.created_at.desc(), MessageModel.id.desc() ), page, per_page
    )
    unread_count = MessageModel.query.filter_by( recipient_id=user.id, is_read=False ).count()
    return pagination, unread_count


def _get_own_message( message_id, user ):
    message = MessageModel.query.filter_by( id=message_id, recipient_id=user.id ).first()
    if not message:
        raise ModelMessageNotFoundError()
    return message


def get_message( message_id, user ):
    """A single message of the user's inbox. Reading it marks it read."""

    message = _get_own_message( message_id, user )
    if not message.is_read:
        message.is_read = True
        message.read_at = datetime.utcnow()
        database.session.commit()
    return message


def delete_message( message_id, user ):
    message = _get_own_message( message_id, user )
    database.session.delete( message )
    database.session.commit()
    return True

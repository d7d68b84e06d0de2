"""The model for the Feed In Need API service: notification and message tables.

Notifications are short in-app events raised by lifecycle transitions. Messages are inbox entries sent by admins.
"""
# pylint: disable=R0903
from datetime import datetime

from feed_in_need.flask_essentials import database

NOTIFICATION_TYPES = (
    'verification_approved',
    'verification_rejected',
    'donation_approved',
    'donation_rejected',
    'food_request_approved',
    'food_request_rejected',
    'new_request',
    'donation_claimed',
    'certificate',
    'trusted_badge_given',
    'trusted_badge_earned',
    'trusted_badge_removed',
    'admin_message',
    'general'
)


class NotificationModel( database.Model ):
    """An in-app notification for one user."""

    __tablename__ = 'notification'
    id = database.Column( database.Integer, primary_key=True, autoincrement=True, nullable=False )
    user_id = database.Column( database.Integer, nullable=False, index=True )
    type = database.Column( database.Enum( *NOTIFICATION_TYPES, native_enum=False ), nullable=False )
    title = database.Column( database.VARCHAR( 255 ), nullable=False )
    message = database.Column( database.Text, nullable=False )
    link = database.Column( database.VARCHAR( 255 ), nullable=True )
    data = database.Column( database.JSON, nullable=True )
    is_read = database.Column( database.Boolean, nullable=False, default=False )
    created_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow )


class MessageModel( database.Model ):
    """An inbox message from an admin to a user."""

    __tablename__ = 'message'
    id = database.Column( database.Integer, primary_key=True, autoincrement=True, nullable=False )
    recipient_id = database.Column( database.Integer, nullable=False, index=True )
    sender_id = database.Column( database.Integer, nullable=False )
    subject = database.Column( database.VARCHAR( 255 ), nullable=False )
    message = database.Column( database.Text, nullable=False )
    action_required = database.Column( database.VARCHAR( 255 ), nullable=True )
    is_read = database.Column( database.Boolean, nullable=False, default=False )
    read_at = database.Column( database.DateTime, nullable=True )
    created_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow )

    sender = database.relationship(
        'UserModel',
        foreign_keys=[ sender_id ],
        primaryjoin='MessageModel.sender_id == UserModel.id',
        uselist=False,
        viewonly=True
    )

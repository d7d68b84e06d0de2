"""Controllers for Flask-RESTful resources: the caller's notifications."""
from feed_in_need.exceptions.exception_model import ModelNotificationNotFoundError
from feed_in_need.flask_essentials import database
from feed_in_need.models.notification import NotificationModel

MAX_NOTIFICATIONS = 50


def get_my_notifications( user, unread_only=False ):
    """The latest notifications of the user and the unread count.

    :return: ( list of NotificationModel, unread count )
    """

    query = NotificationModel.query.filter_by( user_id=user.id )
    if unread_only:
        query = query.filter( NotificationModel.is_read.is_( False ) )
    notifications = query.order_by( NotificationModel.created_at.desc(), NotificationModel.id.desc() ) \
        .limit( MAX_NOTIFICATIONS ).all()
    unread_count = NotificationModel.query.filter_by( user_id=user.id, is_read=False ).count()
    return notifications, unread_count


def mark_notification_read( notification_id, user ):
    notification = NotificationModel.query.filter_by( id=notification_id, user_id=user.id ).first()
    if not notification:
        raise ModelNotificationNotFoundError()
    notification.is_read = True
    database.session.commit()
    return notification


def mark_all_notifications_read( user ):
    """Mark every unread notification of the user as read.

    :return: The number of notifications updated.
    """

    updated = NotificationModel.query.filter_by( user_id=user.id, is_read=False ) \
        .update( { NotificationModel.is_read: True }, synchronize_session=False )
    database.session.commit()
    return updated

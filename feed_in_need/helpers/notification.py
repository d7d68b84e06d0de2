"""The notification sink: persists in-app notifications for lifecycle events.

notify() commits its own row, so it is called from post-commit hooks, after the transition it reports on is
committed. It never raises into the caller.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from feed_in_need.flask_essentials import database
from feed_in_need.models.notification import NotificationModel


def notify( user_id, notification_type, title, message, link=None, data=None ):
    """Persist a notification for a user.

    :param int user_id: The recipient.
    :param str notification_type: One of NOTIFICATION_TYPES.
    :param str title: Short title.
    :param str message: The body.
    :param str link: Frontend path to open, optional.
    :param dict data: Extra identifiers for the frontend, optional.
    :return: The NotificationModel, or None on failure.
    """

    notification = NotificationModel(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        link=link,
        data=data
    )
    try:
        database.session.add( notification )
        database.session.commit()
    except SQLAlchemyError:
        logging.exception( 'Notification %s for user %s failed.', notification_type, user_id )
        database.session.rollback()
        return None

    return notification

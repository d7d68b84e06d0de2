"""The Resources entry point for the caller's notifications and inbox messages."""
from http import HTTPStatus

from flask import current_app
from flask import request

from feed_in_need.controllers.message import delete_message
from feed_in_need.controllers.message import get_message
from feed_in_need.controllers.message import get_my_messages
from feed_in_need.controllers.notification import get_my_notifications
from feed_in_need.controllers.notification import mark_all_notifications_read
from feed_in_need.controllers.notification import mark_notification_read
from feed_in_need.helpers.auth import AuthenticatedResource
from feed_in_need.helpers.auth import get_current_user
from feed_in_need.helpers.manage_paginate import get_page_information
from feed_in_need.helpers.manage_paginate import paged_response
from feed_in_need.helpers.model_serialization import to_json
from feed_in_need.helpers.responses import envelope
from feed_in_need.schemas.notification import MessageSchema
from feed_in_need.schemas.notification import NotificationSchema
# pylint: disable=too-few-public-methods
# pylint: disable=no-self-use


def unread_only_requested():
    return request.args.get( 'unread', '' ).lower() in ( '1', 'true' )


class Notifications( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for the caller's latest notifications."""

    def get( self ):
        notifications, unread_count = get_my_notifications( get_current_user(), unread_only_requested() )
        return envelope(
            NotificationSchema( many=True ).dump( notifications ), count=len( notifications ), unread_count=unread_count
        ), HTTPStatus.OK


class NotificationRead( AuthenticatedResource ):
    """Flask-RESTful resource endpoint to mark one notification read."""

    def put( self, notification_id ):
        notification = mark_notification_read( notification_id, get_current_user() )
        return envelope( to_json( NotificationSchema(), notification ) ), HTTPStatus.OK


class NotificationsReadAll( AuthenticatedResource ):
    """Flask-RESTful resource endpoint to mark every notification read."""

    def put( self ):
        updated = mark_all_notifications_read( get_current_user() )
        return envelope( { 'updated': updated }, 'All notifications marked as read.' ), HTTPStatus.OK


class Messages( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for the caller's inbox."""

    def get( self ):
        page, per_page = get_page_information( request.args, current_app.config.get( 'ADMIN_ROWS_PER_PAGE', 20 ) )
        pagination, unread_count = get_my_messages( get_current_user(), unread_only_requested(), page, per_page )
        return paged_response(
            pagination,
            MessageSchema( many=True ).dump( pagination.items ),
            request.args,
            request.base_url,
            unread_count=unread_count
        )


class MessageById( AuthenticatedResource ):
    """Flask-RESTful resource endpoints to read or delete one inbox message."""

    def get( self, message_id ):
        message = get_message( message_id, get_current_user() )
        return envelope( to_json( MessageSchema(), message ) ), HTTPStatus.OK

    def delete( self, message_id ):
        delete_message( message_id, get_current_user() )
        return envelope( message='Message deleted.' ), HTTPStatus.OK

"""The Resources entry point for ratings."""
from http import HTTPStatus

from flask import current_app
from flask import request
from flask_restful import Resource

from feed_in_need.controllers.rating import can_rate_request
from feed_in_need.controllers.rating import get_my_rating_stats
from feed_in_need.controllers.rating import get_user_ratings
from feed_in_need.controllers.rating import submit_rating
from feed_in_need.helpers.auth import AuthenticatedResource
from feed_in_need.helpers.auth import get_current_user
from feed_in_need.helpers.manage_paginate import get_page_information
from feed_in_need.helpers.manage_paginate import paged_response
from feed_in_need.helpers.model_serialization import to_json
from feed_in_need.helpers.responses import envelope
from feed_in_need.schemas.rating import RatingSchema
from feed_in_need.schemas.user import UserSummarySchema
# pylint: disable=too-few-public-methods
# pylint: disable=no-self-use


class Ratings( AuthenticatedResource ):
    """Flask-RESTful resource endpoint to rate the other party of a completed request."""

    def post( self ):
        rating, awarded = submit_rating( get_current_user(), request.get_json( silent=True ) )
        return envelope(
            to_json( RatingSchema(), rating ), 'Rating submitted successfully.', trusted_badges_awarded=awarded
        ), HTTPStatus.CREATED


class UserRatings( Resource ):
    """Flask-RESTful resource endpoint for the public ratings of a user."""

    def get( self, user_id ):
        page, per_page = get_page_information( request.args, current_app.config.get( 'DONATIONS_PER_PAGE', 10 ) )
        user, pagination = get_user_ratings( user_id, page, per_page )
        return paged_response(
            pagination,
            RatingSchema( many=True ).dump( pagination.items ),
            request.args,
            request.base_url,
            user=UserSummarySchema( only=( 'id', 'name', 'role', 'is_trusted', 'average_rating' ) ).dump( user )
        )


class CanRate( AuthenticatedResource ):
    """Flask-RESTful resource endpoint to ask whether the caller may rate a request."""

    def get( self, request_id ):
        return envelope( can_rate_request( request_id, get_current_user() ) ), HTTPStatus.OK


class MyRatingStats( AuthenticatedResource ):
    """Flask-RESTful resource endpoint for the caller's rating statistics and badge progress."""

    def get( self ):
        return envelope( get_my_rating_stats( get_current_user() ) ), HTTPStatus.OK

"""Module to handle pagination requests.

List endpoints take page and limit on the query string and return the envelope with the paging keys:

    { "success": true, "count": 10, "total": 42, "page": 2, "pages": 5, "data": [ ... ] }

The Link header carries the previous and next pages.
"""
from http import HTTPStatus
from urllib.parse import urlencode

from feed_in_need.exceptions.exception_validation import ValidationFailedError
from feed_in_need.helpers.responses import envelope

MAX_ROWS_PER_PAGE = 100


def get_page_information( args, default_per_page ):
    """Read page and limit from the query string.

    :param args: The request.args MultiDict.
    :param int default_per_page: The limit when none is given.
    :return: ( page, per_page )
    """

    try:
        page = int( args.get( 'page', 1 ) )
        per_page = int( args.get( 'limit', default_per_page ) )
    except ( TypeError, ValueError ):
        raise ValidationFailedError( 'page and limit must be integers.' )

    page = max( page, 1 )
    per_page = min( max( per_page, 1 ), MAX_ROWS_PER_PAGE )
    return page, per_page


def convert_into_page( query, page, per_page ):
    """Take a SQLAlchemy query and paginate it.

    :param query: A Flask-SQLAlchemy query.
    :param int page: The page number, starting at 1.
    :param int per_page: Rows per page.
    :return: A Pagination object. A page past the end is empty rather than an error.
    """

    return query.paginate( page=page, per_page=per_page, error_out=False )


def build_link_header( page, base_url, query_terms=None ):
    """Build the previous and next links for the link header.

    :param page: The Pagination object.
    :param str base_url: The URL for the endpoint.
    :param dict query_terms: The other query string terms to carry over.
    :return: Links for the link header, or None.
    """

    query_string = ''
    if query_terms:
        query_string = '{}&'.format( urlencode( query_terms ) )

    links = []
    if page.has_prev:
        links.append( '<{}?{}limit={}&page={}>; rel="prev"'.format(
            base_url, query_string, page.per_page, page.prev_num
        ) )
    if page.has_next:
        links.append( '<{}?{}limit={}&page={}>; rel="next"'.format(
            base_url, query_string, page.per_page, page.next_num
        ) )

    if not links:
        return None
    return ', '.join( links )


def paging_keys( page ):
    """The count, total, page and pages keys for the envelope."""

    return {
        'count': len( page.items ),
        'total': page.total,
        'page': page.page,
        'pages': page.pages
    }


def paged_response( page, data, request_args, base_url, **extra ):
    """The Flask-RESTful response for a paginated list: envelope, status and the Link header.

    :param page: The Pagination object.
    :param list data: The dumped items.
    :param request_args: The request.args MultiDict, carried over into the links.
    :param str base_url: The URL for the endpoint.
    :param extra: Additional top level keys for the envelope.
    :return: ( body, status, headers )
    """

    query_terms = { key: value for key, value in request_args.items() if key not in ( 'page', 'limit' ) }
    body = envelope( data, **paging_keys( page ), **extra )
    link_header = build_link_header( page, base_url, query_terms )
    headers = { 'Link': link_header } if link_header else {}
    return body, HTTPStatus.OK, headers

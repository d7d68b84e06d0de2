"""Helper to hand templated email to the email service.

The service renders the template named by kind. The payload posted to EMAIL_API_URL looks like:

    { "kind": "receiver_verification_request", "recipient": "admin@feedinneed.org", "data": { "name": "..." } }

Email is a best-effort side channel: send_templated_email() never raises, it reports the outcome.
"""
import logging
from http import HTTPStatus

import requests
from flask import current_app

EMAIL_KINDS = (
    'email_verification',
    'receiver_verification_request',
    'donation_pending_approval',
    'request_pending_approval',
    'verification_result',
    'admin_message'
)


def send_templated_email( kind, recipient, data ):
    """The email POST request builder.

    :param str kind: The template name, one of EMAIL_KINDS.
    :param str recipient: The email address.
    :param dict data: The template variables.
    :return: { 'success': bool, 'error': str } where error is only present on failure.
    """

    email_url = current_app.config.get( 'EMAIL_API_URL' )
    if not email_url:
        logging.warning( 'EMAIL_API_URL is not configured: %s email to %s not sent.', kind, recipient )
        return { 'success': False, 'error': 'Email service is not configured.' }

    headers = { 'content-type': 'application/json', 'X-Api-Key': current_app.config.get( 'EMAIL_API_KEY', '' ) }
    payload = { 'kind': kind, 'recipient': recipient, 'data': data or {} }

    try:
        response = requests.post(
            email_url,
            json=payload,
            headers=headers,
            timeout=current_app.config.get( 'EMAIL_TIMEOUT_SECONDS', 10 )
        )
    except requests.exceptions.RequestException as error:
        logging.exception( 'Email %s to %s failed.', kind, recipient )
        return { 'success': False, 'error': str( error ) }

    if response.status_code not in ( HTTPStatus.OK, HTTPStatus.CREATED, HTTPStatus.ACCEPTED ):
        logging.error( 'Email %s to %s returned HTTP status %s.', kind, recipient, response.status_code )
        return { 'success': False, 'error': 'Email service returned HTTP status {}.'.format( response.status_code ) }

    logging.debug( 'Email %s sent to %s.', kind, recipient )
    return { 'success': True }


def send_admin_email( kind, data ):
    """Send a templated email to ADMIN_EMAIL."""
    return send_templated_email( kind, current_app.config.get( 'ADMIN_EMAIL' ), data )

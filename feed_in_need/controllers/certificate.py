"""Controllers for Flask-RESTful resources: donation certificates.

A certificate is issued by a post-commit hook of the request completion. Its failure is logged and never undoes the
completion.
"""
import logging
from urllib.parse import quote

from flask import current_app

from feed_in_need.exceptions.exception_authorization import AuthorizationError
from feed_in_need.exceptions.exception_model import ModelCertificateNotFoundError
from feed_in_need.exceptions.exception_model import ModelDonationNotFoundError
from feed_in_need.exceptions.exception_model import ModelRequestNotFoundError
from feed_in_need.exceptions.exception_model import ModelUserNotFoundError
from feed_in_need.flask_essentials import database
from feed_in_need.helpers.notification import notify
from feed_in_need.helpers.validation import load_payload
from feed_in_need.models.certificate import CertificateModel
from feed_in_need.models.donation import DonationModel
from feed_in_need.models.request import RequestModel
from feed_in_need.models.user import UserModel
from feed_in_need.schemas.certificate import CertificateImagePayloadSchema


def share_path( certificate_id ):
    return '/share/certificate/{}'.format( certificate_id )


def generate_certificate( request_model, donation, donor, receiver ):
    """Build the certificate snapshot of a completed request. Nothing is persisted.

    :return: An unsaved CertificateModel.
    """

    return CertificateModel(
        donation_id=donation.id,
        request_id=request_model.id,
        donor_id=donor.id,
        receiver_id=receiver.id,
        donor_name=donor.name,
        receiver_name=receiver.name,
        food_title=donation.food_title,
        quantity=donation.quantity,
        address=donation.address,
        completed_at=request_model.completed_at,
        og_title='{} donated {} through Feed In Need'.format( donor.name, donation.food_title ),
        og_description='{} shared {} of {} with {}. Every meal shared is a meal not wasted.'.format(
            donor.name, donation.quantity, donation.food_title, receiver.name
        )
    )


def issue_certificate( request_id ):
    """Persist the certificate of a completed request and notify the donor.

    :param int request_id: The completed request.
    :return: The CertificateModel.
    """

    request_model = database.session.get( RequestModel, request_id )
    if not request_model:
        raise ModelRequestNotFoundError()
    donation = database.session.get( DonationModel, request_model.donation_id )
    if not donation:
        raise ModelDonationNotFoundError()
    donor = database.session.get( UserModel, donation.donor_id )
    receiver = database.session.get( UserModel, request_model.receiver_id )
    if not donor or not receiver:
        raise ModelUserNotFoundError()

    certificate = generate_certificate( request_model, donation, donor, receiver )
    database.session.add( certificate )
    database.session.commit()
    logging.info( 'Certificate %s issued for request %s.', certificate.certificate_id, request_id )

    notify(
        donor.id, 'certificate', 'Donation Certificate',
        'Thank you! Your donation of "{}" to {} is complete. Your certificate is ready to share.'.format(
            donation.food_title, receiver.name
        ),
        link=share_path( certificate.certificate_id ),
        data={ 'certificate_id': certificate.certificate_id, 'donation_id': donation.id }
    )
    return certificate


def get_certificate( certificate_id ):
    certificate = CertificateModel.query.filter_by( certificate_id=certificate_id.upper() ).first()
    if not certificate:
        raise ModelCertificateNotFoundError()
    return certificate


def get_my_certificates( donor ):
    return CertificateModel.query.filter_by( donor_id=donor.id ).order_by( CertificateModel.created_at.desc() ).all()


def get_received_certificates( receiver ):
    return CertificateModel.query.filter_by( receiver_id=receiver.id ) \
        .order_by( CertificateModel.created_at.desc() ).all()


def get_certificate_by_donation( donation_id, user ):
    """The certificate of a donation, for its donor, its receiver or an admin."""

    certificate = CertificateModel.query.filter_by( donation_id=donation_id ).first()
    if not certificate:
        raise ModelCertificateNotFoundError()
    if user.id not in ( certificate.donor_id, certificate.receiver_id ) and not user.is_admin:
        raise AuthorizationError( 'Not authorized to view this certificate.' )
    return certificate


def update_certificate_image( certificate_id, user, payload ):
    """Attach the rendered image URL. The donor of the certificate or an admin only."""

    image_url = load_payload( CertificateImagePayloadSchema(), payload )[ 'image_url' ]
    certificate = get_certificate( certificate_id )
    if certificate.donor_id != user.id and not user.is_admin:
        raise AuthorizationError( 'Not authorized to update this certificate.' )

    certificate.image_url = image_url
    database.session.commit()
    return certificate


def get_share_urls( certificate_id ):
    """Links to share a certificate on social networks.

    :param str certificate_id: The certificate's public ID.
    :return: dict with share_url and one URL per network.
    """

    certificate = get_certificate( certificate_id )
    share_url = '{}{}'.format( current_app.config.get( 'FRONTEND_URL', '' ).rstrip( '/' ),
                               share_path( certificate.certificate_id ) )
    encoded_url = quote( share_url, safe='' )
    text = quote( certificate.og_title or 'Feed In Need donation certificate', safe='' )

    return {
        'share_url': share_url,
        'facebook': 'https://www.facebook.com/sharer/sharer.php?u={}'.format( encoded_url ),
        'whatsapp': 'https://wa.me/?text={}%20{}'.format( text, encoded_url ),
        'twitter': 'https://twitter.com/intent/tweet?text={}&url={}'.format( text, encoded_url ),
        'linkedin': 'https://www.linkedin.com/sharing/share-offsite/?url={}'.format( encoded_url )
    }

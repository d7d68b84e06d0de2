"""The unit tests require building several rows in the database at one time, and this provides that functionality.

Users and donations are deserialized from the default dictionaries through their Marshmallow schemas. Requests and
completions go through the controllers, so that the pickup credentials and counters are those of the application.
"""
from feed_in_need.controllers.request import complete_request
from feed_in_need.controllers.request import create_request
from feed_in_need.controllers.request import review_request
from feed_in_need.flask_essentials import database
from feed_in_need.helpers.auth import issue_access_token
from feed_in_need.helpers.model_serialization import from_json
from feed_in_need.schemas.donation import DonationSchema
from feed_in_need.schemas.user import UserSchema
from tests.helpers.default_dictionaries import get_donation_dict
from tests.helpers.default_dictionaries import get_request_payload
from tests.helpers.default_dictionaries import get_user_dict

DEFAULT_PASSWORD = 'secret-password'


def create_user( update_key_values=None, password=DEFAULT_PASSWORD ):
    """Build, hash the password of and commit a UserModel.

    :param update_key_values: Overrides of the default user dictionary.
    :param str password: The plain password.
    :return: The UserModel.
    """

    user = from_json( UserSchema(), get_user_dict( update_key_values ), create=True )
    user.set_password( password )
    database.session.add( user )
    database.session.commit()
    return user


def create_donor( email='donor@example.org', is_trusted=False, name='Hotel Annapurna' ):
    return create_user( { 'email': email, 'name': name, 'role': 'donor', 'is_trusted': is_trusted } )


def create_receiver( email='receiver@example.org', is_trusted=False, verification_status='approved',
                     name='Bal Mandir Shelter' ):
    return create_user( {
        'email': email,
        'name': name,
        'role': 'receiver',
        'donor_type': None,
        'receiver_type': 'organization',
        'is_trusted': is_trusted,
        'verification_status': verification_status
    } )


def create_admin( email='admin@example.org', role='admin' ):
    return create_user( { 'email': email, 'name': 'Site Admin', 'role': role, 'donor_type': None } )


def create_donation( donor, update_key_values=None ):
    """Build and commit a DonationModel owned by donor, approved and available by default."""

    donation_dict = get_donation_dict( update_key_values )
    donation_dict[ 'donor_id' ] = donor.id
    donation = from_json( DonationSchema(), donation_dict, create=True )
    database.session.add( donation )
    database.session.commit()
    return donation


def create_approved_request( receiver, donation, admin ):
    """A request on donation, approved by the admin unless the receiver is trusted.

    :return: The RequestModel, carrying its confirmation code.
    """

    request_model, auto_approved, _ = create_request( receiver, get_request_payload( donation.id ) )
    if not auto_approved:
        request_model = review_request( request_model.id, admin, { 'status': 'approved' } )
    return request_model


def create_completed_transaction( donor, receiver, admin, update_key_values=None ):
    """A donation of donor picked up by receiver.

    :return: ( RequestModel, CertificateModel or None )
    """

    donation = create_donation( donor, update_key_values )
    request_model = create_approved_request( receiver, donation, admin )
    return complete_request(
        request_model.id, receiver, { 'confirmation_code': request_model.confirmation_code }
    )


def auth_header( user ):
    """The Authorization header of the user, to be called inside an application context."""
    return { 'Authorization': 'Bearer {}'.format( issue_access_token( user ) ) }

"""The model for the Feed In Need API service: certificate table.

A certificate is a write-once snapshot of a completed donation, issued after the request completion commits.
"""
# pylint: disable=R0903
import secrets
from datetime import datetime

from feed_in_need.flask_essentials import database


def generate_certificate_id():
    """A 12 character uppercase hexadecimal identifier for sharing."""
    return secrets.token_hex( 6 ).upper()


class CertificateModel( database.Model ):
    """Snapshot of donor, receiver and food for a completed donation."""

    __tablename__ = 'certificate'
    id = database.Column( database.Integer, primary_key=True, autoincrement=True, nullable=False )
    certificate_id = database.Column(
        database.VARCHAR( 12 ), nullable=False, unique=True, default=generate_certificate_id
    )
    donation_id = database.Column( database.Integer, nullable=False, index=True )
    request_id = database.Column( database.Integer, nullable=False )
    donor_id = database.Column( database.Integer, nullable=False, index=True )
    receiver_id = database.Column( database.Integer, nullable=False, index=True )
    donor_name = database.Column( database.VARCHAR( 100 ), nullable=False )
    receiver_name = database.Column( database.VARCHAR( 100 ), nullable=False )
    food_title = database.Column( database.VARCHAR( 200 ), nullable=False )
    quantity = database.Column( database.VARCHAR( 100 ), nullable=False )
    address = database.Column( database.VARCHAR( 255 ), nullable=True )
    image_url = database.Column( database.VARCHAR( 512 ), nullable=True )
    og_title = database.Column( database.VARCHAR( 255 ), nullable=True )
    og_description = database.Column( database.Text, nullable=True )
    completed_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow )
    created_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow )

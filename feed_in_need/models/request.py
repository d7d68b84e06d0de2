"""The model for the Feed In Need API service: request table.

A request is a receiver's claim on exactly one donation. The pair ( receiver_id, donation_id ) is unique. The
confirmation code and QR payload exist only while the request is approved or completed.
"""
# pylint: disable=R0903
from datetime import datetime

from feed_in_need.flask_essentials import database

REQUEST_STATUSES = ( 'pending', 'approved', 'rejected', 'completed', 'cancelled' )


class RequestModel( database.Model ):
    """A receiver's request for a donation, with pickup credentials and rating flags."""

    __tablename__ = 'request'
    __table_args__ = (
        database.UniqueConstraint( 'receiver_id', 'donation_id', name='uq_request_receiver_donation' ),
    )
    id = database.Column( database.Integer, primary_key=True, autoincrement=True, nullable=False )
    receiver_id = database.Column( database.Integer, nullable=False, index=True )
    donation_id = database.Column( database.Integer, nullable=False, index=True )
    message = database.Column( database.VARCHAR( 500 ), nullable=True )
    servings_needed = database.Column( database.Integer, nullable=True )
    status = database.Column(
        database.Enum( *REQUEST_STATUSES, native_enum=False ), nullable=False, default='pending', index=True
    )
    confirmation_code = database.Column( database.VARCHAR( 6 ), nullable=True )
    qr_code_data = database.Column( database.Text, nullable=True )
    reviewed_by_id = database.Column( database.Integer, nullable=True )
    reviewed_at = database.Column( database.DateTime, nullable=True )
    review_notes = database.Column( database.Text, nullable=True )
    completed_at = database.Column( database.DateTime, nullable=True )
    donor_rated = database.Column( database.Boolean, nullable=False, default=False )
    receiver_rated = database.Column( database.Boolean, nullable=False, default=False )
    created_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow )
    updated_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow )

    receiver = database.relationship(
        'UserModel',
        foreign_keys=[ receiver_id ],
        primaryjoin='RequestModel.receiver_id == UserModel.id',
        uselist=False,
        viewonly=True
    )
    donation = database.relationship(
        'DonationModel',
        foreign_keys=[ donation_id ],
        primaryjoin='RequestModel.donation_id == DonationModel.id',
        uselist=False,
        viewonly=True
    )

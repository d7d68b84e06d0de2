"""The model for the Feed In Need API service: donation table.

A donation is a food offer posted by a donor. Its status is only ever assigned through helpers.lifecycle, which holds
the transition table. References to users are plain integer columns joined by explicit relationships, as a hard delete
of a user or donation does not cascade.
"""
# pylint: disable=R0903
from datetime import datetime

from feed_in_need.flask_essentials import database

DONATION_STATUSES = ( 'available', 'requested', 'claimed', 'completed', 'expired', 'cancelled' )
STORAGE_CONDITIONS = ( 'refrigerated', 'frozen', 'room_temperature', 'hot' )


class DonationModel( database.Model ):
    """A surplus food offer with approval, location and expiry."""

    __tablename__ = 'donation'
    id = database.Column( database.Integer, primary_key=True, autoincrement=True, nullable=False )
    donor_id = database.Column( database.Integer, nullable=False, index=True )
    donor_phone = database.Column( database.VARCHAR( 32 ), nullable=False )
    food_title = database.Column( database.VARCHAR( 200 ), nullable=False )
    food_description = database.Column( database.VARCHAR( 1000 ), nullable=False )
    quantity = database.Column( database.VARCHAR( 100 ), nullable=False )
    storage_condition = database.Column(
        database.Enum( *STORAGE_CONDITIONS, native_enum=False ), nullable=False, default='room_temperature'
    )
    food_photos = database.Column( database.JSON, nullable=False, default=list )
    expiry_date_time = database.Column( database.DateTime, nullable=False )
    latitude = database.Column( database.Float, nullable=False )
    longitude = database.Column( database.Float, nullable=False )
    address = database.Column( database.VARCHAR( 255 ), nullable=False )
    status = database.Column(
        database.Enum( *DONATION_STATUSES, native_enum=False ), nullable=False, default='available', index=True
    )
    is_approved = database.Column( database.Boolean, nullable=False, default=False )
    approved_by_id = database.Column( database.Integer, nullable=True )
    approved_at = database.Column( database.DateTime, nullable=True )
    claimed_by_id = database.Column( database.Integer, nullable=True )
    claimed_at = database.Column( database.DateTime, nullable=True )
    notes = database.Column( database.Text, nullable=True )
    created_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow )
    updated_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow )

    donor = database.relationship(
        'UserModel',
        foreign_keys=[ donor_id ],
        primaryjoin='DonationModel.donor_id == UserModel.id',
        uselist=False,
        viewonly=True
    )
    claimed_by = database.relationship(
        'UserModel',
        foreign_keys=[ claimed_by_id ],
        primaryjoin='DonationModel.claimed_by_id == UserModel.id',
        uselist=False,
        viewonly=True
    )

    def is_expired( self, now=None ):
        """True from the expiry time on."""
        now = now or datetime.utcnow()
        return now >= self.expiry_date_time

    def is_publicly_visible( self, now=None ):
        """Receivers and the public only see approved, available and unexpired donations."""
        return self.is_approved and self.status == 'available' and not self.is_expired( now )

    @property
    def time_remaining( self ):
        """Human readable time until expiry, e.g. '2 day(s)' or '3h 15m'."""

        seconds = ( self.expiry_date_time - datetime.utcnow() ).total_seconds()
        if seconds <= 0:
            return 'Expired'
        hours = int( seconds // 3600 )
        minutes = int( ( seconds % 3600 ) // 60 )
        if hours > 24:
            return '{} day(s)'.format( hours // 24 )
        return '{}h {}m'.format( hours, minutes )

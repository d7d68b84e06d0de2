"""The model for the Feed In Need API service: rating table.

Ratings are written once, after the underlying request is completed, and are never updated or deleted. The unique
constraint on ( request_id, rated_by_id, rating_type ) backs the per-direction rating flags on the request.
"""
# pylint: disable=R0903
from datetime import datetime

from feed_in_need.flask_essentials import database

RATING_TYPES = ( 'donor_to_receiver', 'receiver_to_donor' )


class RatingModel( database.Model ):
    """A 1 to 5 star rating from one party of a completed request to the other."""

    __tablename__ = 'rating'
    __table_args__ = (
        database.UniqueConstraint( 'request_id', 'rated_by_id', 'rating_type', name='uq_rating_request_rater_type' ),
    )
    id = database.Column( database.Integer, primary_key=True, autoincrement=True, nullable=False )
    request_id = database.Column( database.Integer, nullable=False )
    donation_id = database.Column( database.Integer, nullable=False )
    rated_user_id = database.Column( database.Integer, nullable=False, index=True )
    rated_by_id = database.Column( database.Integer, nullable=False, index=True )
    rating_type = database.Column( database.Enum( *RATING_TYPES, native_enum=False ), nullable=False )
    rating = database.Column( database.Integer, nullable=False )
    feedback = database.Column( database.VARCHAR( 500 ), nullable=True, default='' )
    created_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow )

    rated_by = database.relationship(
        'UserModel',
        foreign_keys=[ rated_by_id ],
        primaryjoin='RatingModel.rated_by_id == UserModel.id',
        uselist=False,
        viewonly=True
    )
    donation = database.relationship(
        'DonationModel',
        foreign_keys=[ donation_id ],
        primaryjoin='RatingModel.donation_id == DonationModel.id',
        uselist=False,
        viewonly=True
    )

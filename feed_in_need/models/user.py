"""The model for the Feed In Need API service: user table.

Tables are explicitly named. A single table holds every role: superadmin, admin, donor and receiver. The trust and
rating columns are maintained by the rating and trust engine and by the administrative trust grant and revoke. Notice
that the database=SQLAlchemy() is done through the import of flask_essentials. This will keep the Marshmallow and model
SQLAlchemy sessions the same.
"""
# pylint: disable=R0903
import secrets
from datetime import datetime
from datetime import timedelta

from werkzeug.security import check_password_hash
from werkzeug.security import generate_password_hash

from feed_in_need.flask_essentials import database

USER_ROLES = ( 'superadmin', 'admin', 'donor', 'receiver' )
ADMIN_ROLES = ( 'superadmin', 'admin' )
VERIFICATION_STATUSES = ( 'pending', 'approved', 'rejected' )


class UserModel( database.Model ):
    """An account for any role, with verification, trust badge and rating aggregates."""

    __tablename__ = 'user'
    id = database.Column( database.Integer, primary_key=True, autoincrement=True, nullable=False )
    name = database.Column( database.VARCHAR( 100 ), nullable=False )
    email = database.Column( database.VARCHAR( 255 ), nullable=False, unique=True, index=True )
    password_hash = database.Column( database.VARCHAR( 255 ), nullable=True )
    phone = database.Column( database.VARCHAR( 32 ), nullable=True )
    role = database.Column( database.Enum( *USER_ROLES, native_enum=False ), nullable=False, default='donor' )
    donor_type = database.Column( database.Enum( 'individual', 'hotel', native_enum=False ), nullable=True )
    receiver_type = database.Column(
        database.Enum( 'individual', 'organization', native_enum=False ), nullable=True
    )
    address = database.Column( database.VARCHAR( 255 ), nullable=True )
    verification_status = database.Column(
        database.Enum( *VERIFICATION_STATUSES, native_enum=False ), nullable=False, default='pending'
    )
    verified_at = database.Column( database.DateTime, nullable=True )
    rejection_reason = database.Column( database.Text, nullable=True )
    rejected_at = database.Column( database.DateTime, nullable=True )
    rejected_by_id = database.Column( database.Integer, nullable=True )

    is_trusted = database.Column( database.Boolean, nullable=False, default=False )
    trusted_at = database.Column( database.DateTime, nullable=True )
    trusted_by_id = database.Column( database.Integer, nullable=True )
    trusted_removed_at = database.Column( database.DateTime, nullable=True )
    trusted_removed_by_id = database.Column( database.Integer, nullable=True )
    trusted_removal_reason = database.Column( database.Text, nullable=True )

    average_rating = database.Column( database.Float, nullable=False, default=0.0 )
    total_ratings = database.Column( database.Integer, nullable=False, default=0 )
    successful_donations = database.Column( database.Integer, nullable=False, default=0 )
    successful_receives = database.Column( database.Integer, nullable=False, default=0 )

    is_email_verified = database.Column( database.Boolean, nullable=False, default=False )
    email_verification_code = database.Column( database.VARCHAR( 8 ), nullable=True )
    email_verification_expires = database.Column( database.DateTime, nullable=True )

    created_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow )
    updated_at = database.Column( database.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow )

    def set_password( self, password ):
        """Hash and store the password."""
        self.password_hash = generate_password_hash( password )

    def check_password( self, password ):
        """Compare a candidate password against the stored hash."""
        if not self.password_hash:
            return False
        return check_password_hash( self.password_hash, password )

    def generate_verification_code( self, minutes ):
        """Create a 4 digit email verification code valid for the given minutes.

        :param int minutes: How long the code stays valid.
        :return: The code.
        """
        code = str( 1000 + secrets.randbelow( 9000 ) )
        self.email_verification_code = code
        self.email_verification_expires = datetime.utcnow() + timedelta( minutes=minutes )
        return code

    @property
    def is_admin( self ):
        """Admins and superadmins share every administrative permission."""
        return self.role in ADMIN_ROLES

    @property
    def is_verified_receiver( self ):
        return self.role == 'receiver' and self.verification_status == 'approved'

    @property
    def successful_transactions( self ):
        """The transaction counter that matters for the user's role."""
        if self.role == 'donor':
            return self.successful_donations
        if self.role == 'receiver':
            return self.successful_receives
        return 0

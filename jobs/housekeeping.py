"""Housekeeping sweeps to be run by cron: unverified accounts and expired donations.

python -c "import jobs.housekeeping;jobs.housekeeping.cleanup_unverified_users()"
python -c "import jobs.housekeeping;jobs.housekeeping.expire_donations()"
"""
import logging

from feed_in_need.app import create_app
from feed_in_need.controllers.donation import expire_donations as expire_donations_controller
from feed_in_need.controllers.user import cleanup_unverified_users as cleanup_unverified_users_controller

# The environment variable APP_ENV is set in the Dockerfile, create_app() falls back to DEFAULT.
app = create_app()  # pylint: disable=invalid-name


def cleanup_unverified_users( hours_old=None ):
    """Delete donors and receivers who never verified their email within hours_old hours."""

    with app.app_context():
        deleted = cleanup_unverified_users_controller( hours_old )
    logging.info( 'Housekeeping: %s unverified accounts deleted.', deleted )
    return deleted


def expire_donations():
    """Move available donations past their expiry to expired."""

    with app.app_context():
        expired = expire_donations_controller()
    logging.info( 'Housekeeping: %s donations expired.', expired )
    return expired

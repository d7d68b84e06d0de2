"""Controllers for Flask-RESTful resources: provide endpoint to test health of application."""
from sqlalchemy import text

from feed_in_need.flask_essentials import database


def heartbeat():
    """Controller for simple heartbeat: the application is up and the database answers."""

    database.session.execute( text( 'SELECT 1' ) )
    return True

"""The following script will DROP ALL tables and then CREATE ALL, and bootstrap the superadmin.

Use with caution! drop_all_and_create() removes all existing data, and then reconstructs the tables with no entries.
To run a function navigate to the project root and, for example, on the command line type:

python -c "import scripts.manage_feed_db;scripts.manage_feed_db.drop_all_and_create()"
python -c "import scripts.manage_feed_db;scripts.manage_feed_db.create_superadmin( 'Root', 'root@x.org', 'secret' )"
"""
import logging
from datetime import datetime

from feed_in_need.app import create_app
from feed_in_need.controllers.user import find_user_by_email
from feed_in_need.flask_essentials import database
from feed_in_need.models.user import UserModel

app = create_app()  # pylint: disable=invalid-name


def drop_all_and_create():
    """A function to drop and then recreate the database tables."""

    with app.app_context():
        database.drop_all()
        database.create_all()


def create_superadmin( name, email, password ):
    """Create the superadmin account, verified and ready to log in. There is no endpoint for this.

    :param str name: The display name.
    :param str email: The login email.
    :param str password: The password.
    :return: The ID of the superadmin.
    """

    with app.app_context():
        database.create_all()
        if find_user_by_email( email ):
            logging.warning( 'A user with email %s already exists.', email )
            return None

        superadmin = UserModel(
            name=name,
            email=email.strip().lower(),
            role='superadmin',
            verification_status='approved',
            verified_at=datetime.utcnow(),
            is_email_verified=True
        )
        superadmin.set_password( password )
        database.session.add( superadmin )
        database.session.commit()
        logging.info( 'Superadmin %s created.', superadmin.id )
        return superadmin.id

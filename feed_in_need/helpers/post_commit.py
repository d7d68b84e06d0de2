"""Side effects that run after the primary transaction commits.

Email, notification and certificate generation are best-effort. A controller collects them while it builds the
transition, commits once, and then runs the hooks:

    hooks = PostCommitHooks()
    hooks.add( 'certificate', issue_certificate, request_model.id )
    database.session.commit()
    results = hooks.run()

Each hook is called independently: an exception is logged, the session rolled back, and the hook's result is None.
The primary response never depends on a hook succeeding.
"""
import logging

from feed_in_need.flask_essentials import database


class PostCommitHooks:
    """An ordered list of named callbacks to run after a commit."""

    def __init__( self ):
        self.hooks = []

    def add( self, name, callback, *args, **kwargs ):
        """Register a callback.

        :param str name: The key of the callback's result in run().
        :param callable callback: The callback.
        :return:
        """

        self.hooks.append( ( name, callback, args, kwargs ) )

    def __len__( self ):
        return len( self.hooks )

    def run( self ):
        """Call every registered callback once, in order.

        :return: A dictionary { name: result or None }.
        """

        results = {}
        hooks, self.hooks = self.hooks, []
        for name, callback, args, kwargs in hooks:
            try:
                results[ name ] = callback( *args, **kwargs )
            except Exception:  # pylint: disable=broad-except
                logging.exception( 'Post-commit hook %s failed.', name )
                database.session.rollback()
                results[ name ] = None
        return results

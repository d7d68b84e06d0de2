"""The response envelope shared by every endpoint: { success, message?, data? } plus optional extra keys."""


def envelope( data=None, message=None, success=True, **extra ):
    """Build the response body.

    :param data: The payload, omitted when None.
    :param str message: A user facing message, omitted when None.
    :param bool success: False for the error handlers.
    :param extra: Additional top level keys, e.g. the paging keys.
    :return: dict
    """

    body = { 'success': success }
    if message is not None:
        body[ 'message' ] = message
    if data is not None:
        body[ 'data' ] = data
    body.update( extra )
    return body

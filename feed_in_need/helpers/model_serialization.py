"""A module to facilitate serialization and deserialization of a model given its schema."""


def from_json( model_schema, model_dictionary, create=True ):
    """Takes the model_dictionary and deserializes it into the model using its Marshmallow schema: model_schema.

    Only keys that are columns of the schema's model are used. If create is true the ID is removed so that the
    database assigns one; if create is False the dictionary must carry the ID of the row to update.

    :param obj model_schema: This is a Marshmallow schema to be used for 2-way serialization.
    :param dict model_dictionary: The dictionary that is to be deserialized by the schema.
    :param bool create: Whether to create or update the model. Default is to create.
    :return: The model instance.
    """

    fields = [ column.key for column in model_schema.Meta.model.__table__.columns ]
    if create and 'id' in fields:
        fields.remove( 'id' )

    model_json = { field: model_dictionary[ field ] for field in fields if field in model_dictionary }
    return model_schema.load( model_json )


def to_json( model_schema, model ):
    """Serializes the model given its Schema"""

    return model_schema.dump( model )

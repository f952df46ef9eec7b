"""
### Fields
Selects the fields to be loaded, like the projection of a MongoDB `find()`.

```javascript
$.get('/api/role?query=' + JSON.stringify({
    fields: ['name', 'description'],
}))
```

Syntax:

* Array syntax: `['name', 'description']`
* String syntax: `'name description'`

An empty list loads all fields.
Field names are not validated here: the query builder decides what to do with them.
"""

from .base import MongoFilterHandlerBase
from ..exc import InvalidInputError


class MongoFields(MongoFilterHandlerBase):
    """ Field projection

        * None, []: all fields
        * [ 'a', 'b' ]: only these fields
        * 'a b': same, whitespace-separated

        Extra fields (the `extra_fields` option, and the `force_include` setting)
        are appended after the user's fields.
    """

    query_object_section_name = 'fields'

    def __init__(self, model, force_include=None):
        """ Init a projection

        :param model: The model
        :param force_include: Fields to append to every non-empty projection
        """
        super(MongoFields, self).__init__(model)

        # Settings
        self.force_include = list(force_include or ())

        # On input
        #: The list of fields to select
        self.fields = None

    def input(self, fields, extra_fields=None):
        super(MongoFields, self).input(fields)

        if not fields:
            fields = []
        if isinstance(fields, str):
            fields = fields.split()
        if not isinstance(fields, (list, tuple)):
            raise InvalidInputError('{} must be either a list or a string; {} provided.'
                                    .format(self.query_object_section_name, type(fields).__name__))

        # Not a list: ignored
        if not isinstance(extra_fields, (list, tuple)):
            extra_fields = []

        self.fields = list(fields) + list(extra_fields)
        if self.fields:
            self.fields.extend(self.force_include)
        return self

    def compile(self):
        """ Get the projection: a space-delimited string

        :rtype: str
        """
        return ' '.join(self.fields or ())

    def alter_query(self, query):
        projection = self.compile()
        if not projection:
            return query  # short-circuit
        return query.select(projection)


def compile_projection(fields, extra_fields=None) -> str:
    """ Merge `fields` and `extra_fields` into a projection string """
    return MongoFields(None).input(fields, extra_fields).compile()

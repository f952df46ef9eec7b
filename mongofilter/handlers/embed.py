"""
### Embed
Loads related documents, like Mongoose's `populate()`.

```javascript
$.get('/api/role?query=' + JSON.stringify({
    embed: ['permissions.name', 'permissions.active', 'owner'],
}))
```

Every item is a relation name, optionally followed by a dot and a field of the related document:

* `'owner'`: load the related `owner` with all of its fields
* `'permissions.name'`: load the related `permissions`, only with the `name` field.
    More fields of the same relation add up: `['permissions.name', 'permissions.active']`

When a relation is mentioned both with and without a field, the relation is loaded with all of its fields.
"""

from .base import MongoFilterHandlerBase
from ..exc import InvalidInputError


class EmbedRelation:
    """ A relation to load, with the list of fields to load it with

        `fields` is None, or an empty list, when all fields are loaded
    """

    __slots__ = ('name', 'fields')

    def __init__(self, name, fields=None):
        self.name = name
        self.fields = fields

    def __eq__(self, other):
        return isinstance(other, EmbedRelation) and (self.name, self.fields) == (other.name, other.fields)

    def __repr__(self):
        return '{}({!r}, {!r})'.format(self.__class__.__name__, self.name, self.fields)


class MongoEmbed(MongoFilterHandlerBase):
    """ Relations loading

        * None, []: no relations
        * [ 'a', 'b.x', 'b.y' ]: load `a` fully, and `b` with fields `x` and `y`
    """

    query_object_section_name = 'embed'

    def __init__(self, model):
        super(MongoEmbed, self).__init__(model)

        # On input
        #: The list of relations to load: list[EmbedRelation]
        self.relations = None

    def input(self, paths):
        super(MongoEmbed, self).input(paths)
        if paths is None:
            paths = []
        self._raise_if_not_list(paths, 'Expected array of docs to populate')

        relations = {}  # relation name => EmbedRelation; insertion order is preserved
        for path in paths:
            if not isinstance(path, str):
                raise InvalidInputError('{}: every item must be a string, {} given'
                                        .format(self.query_object_section_name, type(path).__name__))
            name, dot, field = path.partition('.')
            relation = relations.setdefault(name, EmbedRelation(name, []))

            if not dot:
                # The relation is loaded in full
                relation.fields = None
            elif relation.fields is not None:
                relation.fields.append(field)

        self.relations = list(relations.values())
        return self

    def compile(self):
        """ Get the list of relations to load

        :rtype: list[EmbedRelation]
        """
        return list(self.relations or ())

    def alter_query(self, query):
        for relation in self.compile():
            if relation.fields:
                query = query.populate(relation.name, ' '.join(relation.fields))
            else:
                query = query.populate(relation.name)
        return query


def compile_embeds(paths) -> list:
    """ Normalize a list of dotted relation paths into a list of EmbedRelation """
    return MongoEmbed(None).input(paths).compile()

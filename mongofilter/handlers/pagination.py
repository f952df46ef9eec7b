"""
### Pagination
Pagination only applies to collections.

```javascript
$.get('/api/role?query=' + JSON.stringify({
    pagination: {
        page: 3, // 1-based
        size: 30, // 30 items per page
    },
}))
```

Both values are optional: the defaults are page 1, and 30 items per page.
Note that `0` means "use the default" as well.
"""

from .base import MongoFilterHandlerBase
from ..exc import InvalidInputError


NoneType = type(None)


class MongoPagination(MongoFilterHandlerBase):
    """ Page number and page size

        Handles an object: {page, size}, and turns it into limit & skip
    """

    query_object_section_name = 'pagination'

    def __init__(self, model, default_page=1, default_size=30, max_size=None):
        """ Init pagination

        :param model: The model
        :param default_page: Page to use when none is given
        :param default_size: Page size to use when none is given
        :param max_size: The maximum page size. The user can never go any higher than that.
        """
        super(MongoPagination, self).__init__(model)

        # Config
        self.default_page = default_page
        self.default_size = default_size
        self.max_size = max_size
        assert self.max_size is None or self.max_size > 0

        # On input
        self.page = None
        self.size = None
        self.limit = None
        self.skip = None

    def input(self, pagination):
        super(MongoPagination, self).input(pagination)

        if pagination is None:
            pagination = {}
        if not isinstance(pagination, dict):
            raise InvalidInputError('{} must be an object, {} given'
                                    .format(self.query_object_section_name, type(pagination).__name__))

        page, size = pagination.get('page'), pagination.get('size')
        for name, value in (('page', page), ('size', size)):
            if not isinstance(value, (int, NoneType)) or isinstance(value, bool):
                raise InvalidInputError('Pagination {} must be either an integer, or null'.format(name))

        # Falsy values fall back to the defaults: zero included
        self.page = page or self.default_page
        self.size = size or self.default_size

        # Max size
        if self.max_size:
            self.size = min(self.max_size, self.size)

        # Not clamped: page < 1 gives a negative skip
        self.limit = self.size
        self.skip = (self.page - 1) * self.size
        return self

    def compile(self):
        """ Get (limit, skip)

        :rtype: (int, int)
        """
        return self.limit, self.skip

    def alter_query(self, query):
        """ Apply limit() and skip() to the query """
        return query.limit(self.limit).skip(self.skip)

    def get_final_input_value(self):
        return dict(page=self.page, size=self.size)


def resolve_pagination(page=None, size=None):
    """ Resolve page & size into (limit, skip) """
    return MongoPagination(None).input(dict(page=page, size=size)).compile()

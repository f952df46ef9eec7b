"""
### Sort
Sorting only applies to collections: a single-document lookup is never sorted.

```javascript
$.get('/api/role?query=' + JSON.stringify({
    // sort by name, ascending; then by description, descending
    sort: ['name', '-description'],
}))
```

#### Syntax

Sort is a list of terms. Every term is either:

* A string: the field name, prefixed with `-` for descending order.

    ```javascript
    { sort: [ 'a', '-b' ] }  // -> a ASC, b DESC
    ```

* An object with a single field: `{ field: direction }`, where direction is:
    an integer (used as is), `'asc'`, `'default'` (both ascending), or `'desc'`.
    Any other direction is ignored.

    ```javascript
    { sort: [ {a: 'asc'}, {b: -1} ] }  // -> a ASC, b DESC
    ```

When a field is mentioned twice, the last direction wins.
"""

import logging
from collections import OrderedDict

from .base import MongoFilterHandlerBase
from ..exc import InvalidInputError

logger = logging.getLogger(__name__)


class MongoSort(MongoFilterHandlerBase):
    """ Sorting

        * None, []: no sorting
        * [ 'a', '-b' ]: array of strings '[-]<field>'. Default direction = +1
        * [ {a: 'asc'}, {b: -1} ]: array of single-field objects
    """

    query_object_section_name = 'sort'

    #: Named directions
    DIRECTIONS = {
        'desc': -1,
        'asc': +1,
        'default': +1,
    }

    def __init__(self, model):
        super(MongoSort, self).__init__(model)

        # On input
        #: OrderedDict() of a sort spec: {field: direction}, or None
        self.sort_spec = None

    def input(self, sort_spec):
        super(MongoSort, self).input(sort_spec)

        # Empty: no sorting at all
        if not sort_spec:
            self.sort_spec = None
            return self

        self._raise_if_not_list(sort_spec)

        spec = OrderedDict()
        for term in sort_spec:
            if isinstance(term, str):
                if term.startswith('-'):
                    spec[term[1:]] = -1
                else:
                    spec[term] = +1
            elif isinstance(term, dict):
                self._input_object_term(spec, term)
            # anything else is ignored

        self.sort_spec = spec
        return self

    def _input_object_term(self, spec, term):
        """ Handle a {field: direction} term """
        if len(term) > 1:
            raise InvalidInputError('{} term is a plain object; can only have 1 field '
                                    'because of unstable ordering of object keys; '
                                    'use one object per field instead'
                                    .format(self.query_object_section_name))
        for field, direction in term.items():
            if _is_integer(direction):
                spec[field] = int(direction)
            elif isinstance(direction, str) and direction in self.DIRECTIONS:
                spec[field] = self.DIRECTIONS[direction]
            else:
                logger.debug('Ignoring sort direction %r for field %r', direction, field)

    def compile(self):
        """ Get the sort spec

        :rtype: OrderedDict | None
        """
        return self.sort_spec

    def alter_query(self, query):
        if self.sort_spec is None:
            return query  # short-circuit
        return query.sort(self.sort_spec)

    def get_final_input_value(self):
        return [f'{"-" if d < 0 else ""}{name}'
                for name, d in (self.sort_spec or {}).items()]


def _is_integer(value):
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, float) and value.is_integer())


def compile_sort(terms):
    """ Normalize a list of sort terms into an OrderedDict {field: direction}, or None """
    return MongoSort(None).input(terms).compile()

"""
MongoFilter turns REST Query Options into a MongoDB-style document query,
and runs it against [SqlAlchemy](http://www.sqlalchemy.org/) models.

The main use case is the interaction with the UI:
every time the UI needs some *field selection*, *filtering*, *sorting*, *pagination*,
or to load some *related documents*, you won't have to write a single line of repetitive code!

It will let the API user send a JSON Query Options object along with the REST request,
which will control the way the result set is generated:

```javascript
$.get('/api/role?query=' + JSON.stringify({
    fields: ['name', 'points'],  // only load these fields
    filters: [{ key: 'points', operator: '>=', value: 10 }],  // points >= 10
    sort: ['-points'],  // sort by `points` DESC
    embed: ['permissions.name'],  // load related `permissions`, with their names
    pagination: { page: 1, size: 30 },  // first 30 rows
}))
```

On the server side, it's one call:

```python
Role.filter(query_options)  # -> DocumentQuery
Role.filter(query_options, callback)  # -> callback(error, roles)
Role.filter(role_id, {'embed': ['permissions']}, callback)  # -> callback(error, role)
```
"""

# Exceptions that are used here and there
from .exc import *

# The heart of MongoFilter are the handlers:
# that's where your JSON objects are compiled into query parts
from . import handlers
from .handlers import compile_projection, compile_embeds, compile_sort, compile_predicate, resolve_pagination

# MongoFilterQuery compiles Query Options and configures a query with them
from .query import MongoFilterQuery, CompiledQuery, resolve_filter_arguments
from .query import filter_documents, filter_one, filter_many

# The query builder for SqlAlchemy models, and a declarative base mixin that defines .filter() and .find() on it
from .docquery import DocumentQuery
from .sa import MongoFilterBase

# Helpers
from .util import is_document_identifier, new_document_identifier
from .util import MongoFilterSettingsDict

"""

The Query Options object lets the API user decide which documents to load and how.
You would typically send this object in the URL query string, like this:

```
GET /api/role?query={"filters":[{"key":"points","operator":">=","value":10}]}
```

Query Options Syntax
--------------------

Query Options is a JSON object with the following properties, all of them optional:

* `fields`: [Fields](#fields) selects the fields to be loaded
* `filters`: [Filters](#filters) selects the documents, using your criteria
* `sort`: [Sort](#sort) determines the ordering of the results
* `embed`: [Embed](#embed) loads related documents
* `pagination`: [Pagination](#pagination) pages through the results

An example:

```javascript
{
  fields: ['name', 'points'],  // Only fetch these fields
  filters: [
    { key: 'active', operator: '==', value: true },
    { key: 'points', operator: '>=', value: 10 },
  ],
  sort: ['-points', 'name'],  // Most points first
  embed: ['permissions.name'],  // Load the related 'permissions', only their names
  pagination: { page: 2, size: 10 },  // Second page of 10
}
```

When a single document is loaded by its identifier, only `fields` and `embed` apply.
"""

from .fields import MongoFields, compile_projection
from .embed import MongoEmbed, EmbedRelation, compile_embeds
from .sort import MongoSort, compile_sort
from .filter import MongoFilter, compile_predicate, \
    FilterExpressionBase, FilterFieldExpression, FilterDisjunctionExpression, FilterCustomExpression
from .pagination import MongoPagination, resolve_pagination

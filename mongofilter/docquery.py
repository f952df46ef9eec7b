"""
A document query over SqlAlchemy models.

This is the query builder that MongoFilterQuery configures: it understands MongoDB criteria,
and it has a Mongoose-like chaining interface:

```python
Role.find({'points': {'$gte': 10}}).select('name points').populate('permissions', 'name').sort({'name': 1}).exec()
```

Every document is a row of the model's table; the `_id` key names its primary key.
"""

import logging
import re
from collections import OrderedDict

from sqlalchemy import inspect
from sqlalchemy.orm import Query, load_only, selectinload
from sqlalchemy.sql.expression import and_, or_, not_, true

from .exc import InvalidQueryError, InvalidColumnError, InvalidRelationError

logger = logging.getLogger(__name__)


class DocumentQuery:
    """ A query handle for a SqlAlchemy model

        Methods are chainable. Nothing is sent to the database until exec()
    """

    def __init__(self, model, predicate=None, one=False, session=None):
        """ Init a document query

        :param model: SqlAlchemy model
        :param predicate: MongoDB criteria, or None for all documents
        :param one: Load a single document, or a list of them?
        :param session: The Session to execute the query with
        """
        self.model = model
        self.predicate = predicate
        self.one = one
        self._session = session

        # Built incrementally
        self._criteria = compile_criteria(model, predicate, 'filter')  # fail early
        self._load_only = None  # list of column names
        self._populate = OrderedDict()  # relation name => list of column names | None
        self._sort = None  # list of (column name, direction)
        self._limit = None
        self._skip = None

    def with_session(self, ssn):
        """ Execute with the given Session """
        self._session = ssn
        return self

    def select(self, projection: str):
        """ Only load the given fields: space-delimited names """
        mapper = inspect(self.model)
        columns = []
        for name in projection.split():
            if name == '_id':
                continue  # primary keys are always loaded
            if name in mapper.column_attrs:
                columns.append(name)
            elif name not in mapper.relationships:
                raise InvalidColumnError(self.model.__name__, name, 'fields')
        self._load_only = columns
        return self

    def populate(self, relation: str, fields: str = None):
        """ Load a related document, optionally only with the given fields """
        mapper = inspect(self.model)
        if relation not in mapper.relationships:
            raise InvalidRelationError(self.model.__name__, relation, 'embed')

        columns = None
        if fields:
            target = mapper.relationships[relation].mapper
            columns = []
            for name in fields.split():
                if name == '_id':
                    continue
                if name not in target.column_attrs:
                    raise InvalidColumnError(target.class_.__name__, name, 'embed')
                columns.append(name)
        self._populate[relation] = columns
        return self

    def sort(self, spec):
        """ Order by {field: direction}: negative directions are descending """
        self._sort = [(_resolve_column(self.model, name, 'sort'), direction)
                      for name, direction in spec.items()]
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def skip(self, n: int):
        self._skip = n
        return self

    def to_query(self) -> Query:
        """ Build the SqlAlchemy Query """
        q = Query([self.model], session=self._session)
        if self._criteria:
            q = q.filter(*self._criteria)

        # Projection
        if self._load_only:
            q = q.options(load_only(*(getattr(self.model, name) for name in self._load_only)))

        # Relations
        for relation_name, columns in self._populate.items():
            relation = getattr(self.model, relation_name)
            loader = selectinload(relation)
            if columns:
                target = inspect(self.model).relationships[relation_name].mapper.class_
                loader = loader.load_only(*(getattr(target, name) for name in columns))
            q = q.options(loader)

        # Sort
        if self._sort:
            q = q.order_by(*(column.desc() if direction < 0 else column.asc()
                             for column, direction in self._sort))

        # Slice
        if self._skip:
            q = q.offset(self._skip)
        if self._limit:
            q = q.limit(self._limit)
        return q

    def exec(self, callback=None):
        """ Execute the query

        :param callback: callback(error, result). Any error of the database is given to it.
        :return: The result, when no callback is given: a list, or a single document (or None)
        """
        if callback is None:
            return self._exec()

        try:
            result = self._exec()
        except Exception as e:
            logger.debug('%r failed: %s', self, e)
            error, result = e, None
        else:
            error = None
        callback(error, result)

    def _exec(self):
        if self._session is None:
            raise RuntimeError('{!r} is not bound to a Session: use with_session()'.format(self))
        q = self.to_query()
        logger.debug('Executing %r', self)
        return q.first() if self.one else q.all()

    def all(self):
        """ Load a list of documents """
        return self.to_query().all()

    def first(self):
        """ Load the first document, or None """
        return self.to_query().first()

    def __iter__(self):
        result = self.exec()
        return iter([result] if self.one else result)

    def __repr__(self):
        return '{}({}, {!r})'.format(self.__class__.__name__, self.model.__name__, self.predicate)


# region Criteria compiler

# Operators on fields
# operator => lambda column, value
_operators = {
    '$eq': lambda col, val: col == val,
    # '!=' won't select NULLs: a comparison with NULL is NULL, which is a false value.
    # MongoDB's $ne does select documents where the field is missing.
    '$ne': lambda col, val: col.is_distinct_from(val),
    '$lt': lambda col, val: col < val,
    '$lte': lambda col, val: col <= val,
    '$gt': lambda col, val: col > val,
    '$gte': lambda col, val: col >= val,
    '$in': lambda col, val: col.in_(val),
    # NOT IN won't select NULLs either; MongoDB's $nin does select documents where the field is missing.
    '$nin': lambda col, val: or_(col.is_(None), ~col.in_(val)),
}

#: Operators that always require an array argument
_operators_require_array_value = frozenset(('$in', '$nin'))

#: Boolean operators: the value is a list of criteria
_boolean_operators = frozenset(('$and', '$or', '$nor'))


def compile_criteria(model, criteria, where):
    """ Compile MongoDB criteria into a list of SqlAlchemy conditions, to be ANDed together

    :param model: SqlAlchemy model
    :param criteria: dict: { field: value, field: { $op: value }, $or: [ criteria, ... ] }
    :param where: Where the criteria come from, for error messages
    :rtype: list
    """
    if not criteria:
        return []
    if not isinstance(criteria, dict):
        raise InvalidQueryError('{}: criteria must be an object'.format(where))

    conditions = []
    for key, criterion in criteria.items():
        # Boolean expressions
        if key in _boolean_operators:
            if not isinstance(criterion, (list, tuple)):
                raise InvalidQueryError('{}: {} argument must be a list'.format(where, key))
            subconditions = [_anded_together(compile_criteria(model, c, where)) for c in criterion]
            if key == '$and':
                conditions.append(and_(*subconditions))
            elif key == '$or':
                conditions.append(or_(*subconditions))
            else:
                conditions.append(not_(or_(*subconditions)))
            continue

        column = _resolve_column(model, key, where)
        conditions.extend(_compile_field_criterion(column, key, criterion, where))
    return conditions


def _compile_field_criterion(column, key, criterion, where):
    """ Compile the criterion for a single column: a value, a regexp, or a dict of operators """
    # Regular expression
    if isinstance(criterion, re.Pattern):
        pattern = criterion.pattern
        if criterion.flags & re.IGNORECASE:
            pattern = '(?i)' + pattern
        return [column.regexp_match(pattern)]

    # Fake equality
    if not isinstance(criterion, dict):
        criterion = {'$eq': criterion}

    conditions = []
    for operator, value in criterion.items():
        if operator == '$not':
            # A negated criterion also selects documents where the field is missing
            conditions.append(or_(column.is_(None),
                                  not_(_anded_together(_compile_field_criterion(column, key, value, where)))))
            continue

        try:
            operator_lambda = _operators[operator]
        except KeyError:
            raise InvalidQueryError('Unsupported operator "{}" found in {} for column `{}`'
                                    .format(operator, where, key))
        if operator in _operators_require_array_value and not isinstance(value, (list, tuple)):
            raise InvalidQueryError('{}: {} argument must be an array for column `{}`'
                                    .format(where, operator, key))
        conditions.append(operator_lambda(column, value))
    return conditions


def _anded_together(conditions):
    """ AND a list of conditions together. No conditions: True """
    if not conditions:
        return true()
    return and_(*conditions) if len(conditions) > 1 else conditions[0]


def _resolve_column(model, name, where):
    """ Get a column by name. `_id` is the primary key """
    mapper = inspect(model)
    if name == '_id':
        return mapper.primary_key[0]
    if name not in mapper.column_attrs:
        raise InvalidColumnError(model.__name__, name, where)
    return getattr(model, name)

# endregion

"""
### Filters
Filtering corresponds to the criteria of a MongoDB `find()`.

Filters are a list of clauses; every clause has a `key` (the field), an `operator`, and a `value`:

```javascript
$.get('/api/role?query=' + JSON.stringify({
    filters: [
        // all conditions are AND-ed together
        { key: 'points', operator: 'between', value: [10, 20] },
        { key: 'name', operator: '~', value: '^admin' },
    ]
}))
```

#### Operators

* `==`: `field = value`
* `!=`: `field != value`
* `~`: field matches the regular expression, case-insensitive
* `!~`: field does not contain a match of the regular expression, case-insensitive
* `<`, `<=`, `>`, `>=`: comparisons
* `in`: field is one of the values in the array
* `not in`: field is none of the values in the array
* `between`: `lo <= field <= hi`, for a `[lo, hi]` array
* `not between`: `field < lo OR field > hi`, for a `[lo, hi]` array

A filter on a field replaces any earlier filter on the same field.
Because `not between` produces a top-level `$or`, only the last `not between` clause is effective.
"""

import re

from .base import MongoFilterHandlerBase
from ..exc import InvalidInputError, InvalidPatternError, UnsupportedOperatorError


# region Filter Expression Classes

def _is_array(value):
    return isinstance(value, (list, tuple))


class FilterExpressionBase:
    """ An expression from the MongoFilter object

        Every expression contributes one key to the resulting MongoDB criteria
    """

    __slots__ = ('key', 'operator_str', 'value')

    def __init__(self, key, operator_str, value):
        self.key = key
        self.operator_str = operator_str
        self.value = value

    def __repr__(self):
        return '{} {} {!r}'.format(self.key, self.operator_str, self.value)

    def compile_expression(self):
        """ Compile the expression into a MongoDB criteria dict """
        raise NotImplementedError()


class FilterFieldExpression(FilterExpressionBase):
    """ An expression on a field: {field: criterion} """

    __slots__ = ('operator_lambda',)

    def __init__(self, key, operator_str, operator_lambda, value):
        super(FilterFieldExpression, self).__init__(key, operator_str, value)
        self.operator_lambda = operator_lambda

    def compile_expression(self):
        return {self.key: self.operator_lambda(self.value)}


class FilterDisjunctionExpression(FilterExpressionBase):
    """ A top-level disjunction: {'$or': [criteria, ...]}

        The '$or' key is shared by all disjunctions: the last one wins.
    """

    __slots__ = ('operator_lambda',)

    def __init__(self, key, operator_str, operator_lambda, value):
        super(FilterDisjunctionExpression, self).__init__(key, operator_str, value)
        self.operator_lambda = operator_lambda

    def compile_expression(self):
        return {'$or': self.operator_lambda(self.key, self.value)}


class FilterCustomExpression(FilterExpressionBase):
    """ An expression implemented by a custom operator: returns a criteria dict of its own """

    __slots__ = ('operator_lambda',)

    def __init__(self, key, operator_str, operator_lambda, value):
        super(FilterCustomExpression, self).__init__(key, operator_str, value)
        self.operator_lambda = operator_lambda

    def compile_expression(self):
        return dict(self.operator_lambda(self.key, self.value))

# endregion


def _compile_regex(pattern, source):
    """ Compile a case-insensitive regular expression, or fail with InvalidPatternError """
    try:
        return re.compile(pattern, re.IGNORECASE)
    except (re.error, TypeError) as e:
        raise InvalidPatternError(source, str(e))


class MongoFilter(MongoFilterHandlerBase):
    """ Filter clauses

        * None, []: no filtering
        * [ {key, operator, value}, ... ]: clauses ANDed together

        Produces a MongoDB criteria dict
    """

    query_object_section_name = 'filters'

    def __init__(self, model, operators=None):
        """ Init a filter

        :param model: The model
        :param operators: A dict of additional operators: {'token': callable(key, value) -> dict}
        :type operators: dict[str, callable]
        """
        super(MongoFilter, self).__init__(model)

        # Extra configuration
        self._extra_operators = dict(operators or {})
        shadowed = set(self._extra_operators) & self.SUPPORTED_OPERATORS
        if shadowed:
            raise ValueError('Custom operators cannot replace built-in ones: {}'
                             .format(', '.join(sorted(shadowed))))

        # On input
        #: The list of parsed clauses
        self.expressions = None

    # Operators for fields
    _operators = {
        # operator => lambda value: criterion
        '==': lambda val: val,
        '!=': lambda val: {'$ne': val},
        '~': lambda val: _compile_regex(val, val),
        '!~': lambda val: _compile_regex('^((?!' + val + ').)*$', val),
        '<': lambda val: {'$lt': val},
        '<=': lambda val: {'$lte': val},
        '>': lambda val: {'$gt': val},
        '>=': lambda val: {'$gte': val},
        'in': lambda val: {'$in': list(val)},
        'not in': lambda val: {'$not': {'$in': list(val)}},
        'between': lambda val: {'$gte': val[0], '$lte': val[1]},
    }

    # Operators that make a top-level disjunction
    _disjunction_operators = {
        # operator => lambda key, value: list of criteria
        'not between': lambda key, val: [{key: {'$lt': val[0]}}, {key: {'$gt': val[1]}}],
    }

    #: Operators that require a string value: it's a regular expression
    _operators_require_pattern_value = frozenset(('~', '!~'))

    #: Operators that always require an array value
    _operators_require_array_value = frozenset(('in', 'not in'))

    #: Operators that require a [lo, hi] array value
    _operators_require_range_value = frozenset(('between', 'not between'))

    SUPPORTED_OPERATORS = frozenset(_operators) | frozenset(_disjunction_operators)

    # These classes implement compilation
    # You can override them, if necessary
    _FIELD_EXPRESSION_CLS = FilterFieldExpression
    _DISJUNCTION_EXPRESSION_CLS = FilterDisjunctionExpression
    _CUSTOM_EXPRESSION_CLS = FilterCustomExpression

    def input(self, clauses):
        super(MongoFilter, self).input(clauses)
        self.expressions = self._parse_clauses(clauses)
        return self

    def _parse_clauses(self, clauses):
        """ Parse filter clauses and return a list of parsed objects.

        Validation happens right here, so that every error is raised before a query is built.

        :type clauses: list[dict] | None
        :rtype: list[FilterExpressionBase]
        """
        if not clauses:
            return []
        self._raise_if_not_list(clauses)

        expressions = []
        for clause in clauses:
            if not isinstance(clause, dict) or 'key' not in clause or 'operator' not in clause:
                raise InvalidInputError('{}: every clause must be an object with `key` and `operator`'
                                        .format(self.query_object_section_name))
            expressions.append(self._parse_clause(clause['key'], clause['operator'], clause.get('value')))
        return expressions

    def _parse_clause(self, key, operator, value):
        """ Parse a single clause into an expression object """
        # Custom operators
        if operator in self._extra_operators:
            return self._CUSTOM_EXPRESSION_CLS(key, operator, self._extra_operators[operator], value)

        if operator not in self.SUPPORTED_OPERATORS:
            raise UnsupportedOperatorError(operator, key)

        # Validate operator argument
        if operator in self._operators_require_array_value and not _is_array(value):
            raise InvalidInputError('{} operator requires an array of values for key `{}`'
                                    .format(operator, key))
        if operator in self._operators_require_range_value and not (_is_array(value) and len(value) == 2):
            raise InvalidInputError('Expected 2 values for {} operator for key `{}`'
                                    .format(operator, key))
        if operator in self._operators_require_pattern_value and not isinstance(value, str):
            raise InvalidPatternError(value, 'a string is expected')

        if operator in self._disjunction_operators:
            return self._DISJUNCTION_EXPRESSION_CLS(key, operator, self._disjunction_operators[operator], value)

        expression = self._FIELD_EXPRESSION_CLS(key, operator, self._operators[operator], value)
        # Regular expressions have to fail right now
        if operator in self._operators_require_pattern_value:
            expression.compile_expression()
        return expression

    def compile(self):
        """ Create MongoDB criteria

        Every expression contributes its keys; later expressions replace earlier ones.

        :rtype: dict
        """
        criteria = {}
        for e in self.expressions or ():
            criteria.update(e.compile_expression())
        return criteria

    def alter_query(self, query):
        """ Criteria are given to find() when the query is made: see MongoFilterQuery.end() """
        return query


def compile_predicate(clauses) -> dict:
    """ Compile a list of filter clauses into MongoDB criteria """
    return MongoFilter(None).input(clauses).compile()

class BaseMongoFilterException(ValueError):
    pass


class InvalidQueryError(BaseMongoFilterException):
    """ Invalid Query Options provided by the User """

    def __init__(self, err: str):
        super(InvalidQueryError, self).__init__('Query options error: {err}'.format(err=err))


class InvalidInputError(InvalidQueryError):
    """ A Query Options section has the wrong shape (e.g. an object where an array is expected) """


class InvalidPatternError(InvalidQueryError):
    """ A regular expression filter value does not compile """

    def __init__(self, pattern: str, err: str):
        self.pattern = pattern
        super(InvalidPatternError, self).__init__('Invalid RegExp {!r}: {}'.format(pattern, err))


class UnsupportedOperatorError(InvalidQueryError):
    """ A filter clause uses an operator that is not known """

    def __init__(self, operator: str, key: str = None):
        self.operator = operator
        self.key = key
        super(UnsupportedOperatorError, self).__init__(
            'Not Supported Operator "{operator}" found in filters for key `{key}`'.format(
                operator=operator,
                key=key)
        )


class DisabledError(InvalidQueryError):
    """ The feature is disabled """


class InvalidColumnError(BaseMongoFilterException):
    """ Query mentioned an invalid column name """

    def __init__(self, model: str, column_name: str, where: str):
        self.model = model
        self.column_name = column_name
        self.where = where

        super(InvalidColumnError, self).__init__(
            'Invalid column "{column_name}" for "{model}" specified in {where}'.format(
                column_name=column_name,
                model=model,
                where=where)
        )


class InvalidRelationError(InvalidColumnError):
    """ Query mentioned an invalid relationship name """

    def __init__(self, model: str, column_name: str, where: str):
        self.model = model
        self.column_name = column_name
        self.where = where

        super(InvalidColumnError, self).__init__(
            'Invalid relation "{column_name}" for "{model}" specified in {where}'.format(
                column_name=column_name,
                model=model,
                where=where)
        )

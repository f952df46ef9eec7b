import logging
from copy import copy

from . import handlers
from .exc import InvalidInputError
from .util import MongoFilterSettingsHandler, is_document_identifier

logger = logging.getLogger(__name__)


class CompiledQuery:
    """ The result of compiling Query Options: everything the query builder needs

        * identifier: the identifier of the single document to load, or None for a collection
        * predicate: MongoDB criteria given to find() / find_one(), or None to load everything
        * projection: space-delimited field names, or an empty string for all fields
        * relations: list[EmbedRelation] to populate()
        * sort: OrderedDict {field: direction}, or None
        * limit, skip: pagination; None for a single document
    """

    __slots__ = ('identifier', 'predicate', 'projection', 'relations', 'sort', 'limit', 'skip')

    def __init__(self, identifier=None, predicate=None, projection='', relations=(), sort=None, limit=None, skip=None):
        self.identifier = identifier
        self.predicate = predicate
        self.projection = projection
        self.relations = list(relations)
        self.sort = sort
        self.limit = limit
        self.skip = skip

    @property
    def is_collection(self):
        return not self.identifier

    def to_dict(self):
        """ Describe the compiled query as a dict, mostly for logging and debugging """
        result = dict(predicate=self.predicate)
        if self.identifier:
            result['identifier'] = self.identifier
        if self.projection:
            result['projection'] = self.projection
        if self.relations:
            result['relations'] = [dict(name=r.name, fields=r.fields) for r in self.relations]
        if self.sort is not None:
            result['sort'] = dict(self.sort)
        if self.limit is not None:
            result['limit'] = self.limit
            result['skip'] = self.skip
        return result

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self.to_dict())


def resolve_filter_arguments(*args):
    """ Tell apart the many ways filter() can be called

        * filter()
        * filter(callback)
        * filter(identifier)
        * filter(query_options)
        * filter(identifier, callback)
        * filter(query_options, callback)
        * filter(identifier, query_options)
        * filter(identifier, query_options, callback)

        With less than 3 arguments, a first argument that is not a document identifier
        is taken to be the query options.

        :return: (identifier, query_options, callback)
        :raises TypeError: too many arguments
    """
    if len(args) > 3:
        raise TypeError('filter() takes at most 3 positional arguments ({} given)'.format(len(args)))
    identifier, conditions, callback = (tuple(args) + (None, None, None))[:3]

    if len(args) < 3:
        if callable(identifier):
            # filter(callback)
            return None, {}, identifier
        if callable(conditions):
            # filter(identifier, callback), filter(query_options, callback)
            callback, conditions = conditions, None
        if identifier and not is_document_identifier(identifier):
            # filter(query_options), filter(query_options, callback)
            identifier, conditions = None, identifier

    return identifier, conditions or {}, callback


class MongoFilterQuery(object):
    """ REST Query Options, compiled into a MongoDB-style query

        Usage:

            MongoFilterQuery(Role).query({'filters': [...], 'sort': ['-points']}).end()

        The work is done in two phases:

        1. query() validates and compiles the Query Options. Any error is raised right here.
        2. end() asks the model for a query handle (find() or find_one()), and configures it;
            exec() also executes it.

        The model is anything that provides two methods: find(predicate=None) and find_one(predicate),
        which return a query handle with the following methods:
        select(projection), populate(relation, fields=None), sort(spec), limit(n), skip(n), exec(callback=None).
        See mongofilter.docquery.DocumentQuery
    """

    def __init__(self, model, handler_settings=None):
        """ Init a query

        :param model: The model to query. See the class doc.
        :param handler_settings: Settings for Query Options handlers.
            These are just plain kwargs names for every handler object's __init__ method.
            See MongoFilterSettingsDict for the full list.

            To disable a section, give its `<name>_enabled` key mapped to a `False`:

                sort_enabled=False
        :type handler_settings: dict | MongoFilterSettingsDict | None
        """
        self._model = model

        # Initialize the settings
        self._handler_settings = MongoFilterSettingsHandler(handler_settings or {})

        # Input
        self._identifier = None
        self._lookup = None
        self._input_received = False

        # Get ready: Query Options handlers
        self._init_query_options_handlers()

    def __copy__(self):
        """ MongoFilterQuery can be reused: copy() it before every query()

            This method implements proper copying so that this MongoFilterQuery can be reused.
        """
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update(self.__dict__)

        # Copy Query Options handlers
        for name in self.HANDLER_ATTR_NAMES:
            setattr(result, name, copy(getattr(result, name)).with_mongofilter(result))

        return result

    @property
    def model(self):
        return self._model

    @property
    def is_collection(self):
        """ Is it a query for a collection of documents, rather than for a single one? """
        return not self._identifier

    def query(self, query_options: dict = None, identifier=None):
        """ Validate and compile Query Options

        :param query_options: Query Options: fields, pagination, filters, sort, embed, extra_fields
        :param identifier: Identifier of the single document to load.
            The `indifier` key of Query Options, when present, is used to look the document up instead.
        :raises InvalidInputError: unknown Query Options provided (extra keys)
        :raises InvalidQueryError: syntax error in any of the sections
        :rtype: MongoFilterQuery
        """
        if query_options is None:
            query_options = {}
        if not isinstance(query_options, dict):
            raise InvalidInputError('Query options must be an object, {} given'.format(type(query_options).__name__))
        query_options = dict(query_options)  # the caller's object is never modified

        # Options that are not sections
        extra_fields = query_options.pop('extra_fields', None)
        extra_fields = query_options.pop('extraFields', extra_fields)
        self._lookup = query_options.pop('indifier', None)
        self._identifier = identifier or None

        # Check if Query Options keys are all right
        invalid_keys = set(query_options.keys()) - self.HANDLER_NAMES
        if invalid_keys:
            raise InvalidInputError(u'Unknown query options: {}'.format(', '.join(sorted(invalid_keys))))

        # Process every section with its handler
        # Every handler is invoked because they have defaults even when no input was provided
        for handler_name, handler in self._handlers_ordered_for_query_method():
            input_value = query_options.get(handler_name, None)

            # Disabled handlers: only an error when there actually is any input
            if input_value is not None or (handler_name == 'fields' and extra_fields is not None):
                self._raise_if_handler_is_not_enabled(handler_name)

            if handler_name == 'fields':
                handler.input(input_value, extra_fields)
            else:
                handler.input(input_value)

        self._input_received = True
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug('%r: compiled %r', self, self.compile())
        return self

    def compile(self) -> CompiledQuery:
        """ Get the compiled query

        :rtype: CompiledQuery
        """
        assert self._input_received, 'MongoFilterQuery.compile() can only be used after query()'

        if self.is_collection:
            limit, skip = self.handler_pagination.compile()
            return CompiledQuery(
                predicate=self.handler_filters.compile() or None,
                projection=self.handler_fields.compile(),
                relations=self.handler_embed.compile(),
                sort=self.handler_sort.compile(),
                limit=limit,
                skip=skip,
            )
        else:
            return CompiledQuery(
                identifier=self._identifier,
                predicate=self._lookup or {'_id': self._identifier},
                projection=self.handler_fields.compile(),
                relations=self.handler_embed.compile(),
            )

    def end(self):
        """ Get the configured query handle, not executed yet

        :return: The query handle that model.find() or model.find_one() has returned
        """
        compiled = self.compile()

        if not compiled.is_collection:
            q = self._model.find_one(compiled.predicate)
        elif compiled.predicate:
            q = self._model.find(compiled.predicate)
        else:
            q = self._model.find()

        # Apply every handler
        for handler_name, handler in self._handlers_ordered_for_end_method():
            q = handler.alter_query(q)

        return q

    def exec(self, callback=None):
        """ Execute the query

        :param callback: callback(error, result). When given, is called once, and exec() returns nothing.
        :return: the result, when no callback is given
        """
        return self.end().exec(callback)

    # region Entry points

    def filter(self, *args, extra_fields=None):
        """ Load documents; accepts all the legacy call shapes

            See resolve_filter_arguments() for the list.

            :return: The query handle, when no callback is given
        """
        identifier, conditions, callback = resolve_filter_arguments(*args)
        if identifier:
            return self.filter_one(identifier, conditions, callback, extra_fields=extra_fields)
        else:
            return self.filter_many(conditions, callback, extra_fields=extra_fields)

    def filter_one(self, identifier, conditions=None, callback=None, extra_fields=None):
        """ Load a single document by its identifier

            Only `fields` and `embed` from the Query Options are used.

            :return: The query handle, when no callback is given
        """
        return self._filter(conditions, identifier, callback, extra_fields)

    def filter_many(self, conditions=None, callback=None, extra_fields=None):
        """ Load a collection of documents

            :return: The query handle, when no callback is given
        """
        return self._filter(conditions, None, callback, extra_fields)

    def _filter(self, conditions, identifier, callback, extra_fields):
        if conditions is None:
            conditions = {}
        if not isinstance(conditions, dict):
            raise InvalidInputError('Query options must be an object, {} given'.format(type(conditions).__name__))
        if extra_fields is not None:
            conditions = dict(conditions, extra_fields=extra_fields)

        # Validation errors are raised from here, never given to the callback
        self.query(conditions, identifier=identifier)

        if callback is None:
            return self.end()
        self.exec(callback)

    # endregion

    def __repr__(self):
        return 'MongoFilterQuery({})'.format(getattr(self._model, '__name__', self._model))

    # region Query Options handlers

    _QO_HANDLER_FIELDS = handlers.MongoFields
    _QO_HANDLER_EMBED = handlers.MongoEmbed
    _QO_HANDLER_SORT = handlers.MongoSort
    _QO_HANDLER_FILTERS = handlers.MongoFilter
    _QO_HANDLER_PAGINATION = handlers.MongoPagination

    HANDLER_NAMES = frozenset(('fields',
                               'embed',
                               'sort',
                               'filters',
                               'pagination'))
    HANDLER_ATTR_NAMES = frozenset('handler_' + name
                                   for name in HANDLER_NAMES)

    #: Sections that only apply to collections
    COLLECTION_HANDLER_NAMES = frozenset(('sort', 'filters', 'pagination'))

    def _handlers(self):
        """ Get the list of (handler_name, handler) that apply to the current query """
        # The ordering of these handlers defines the order of calls made to the query handle:
        # select(), populate(), sort(), limit(), skip()
        all_handlers = (
            ('filters', self.handler_filters),
            ('fields', self.handler_fields),
            ('embed', self.handler_embed),
            ('sort', self.handler_sort),
            ('pagination', self.handler_pagination),
        )
        if self.is_collection:
            return all_handlers
        return tuple((name, handler)
                     for name, handler in all_handlers
                     if name not in self.COLLECTION_HANDLER_NAMES)

    def _handlers_ordered_for_query_method(self):
        """ Handlers in an order suitable for the query() method """
        return self._handlers()

    def _handlers_ordered_for_end_method(self):
        """ Handlers in an order suitable for the end() method """
        # Filters are given to find() instead
        return tuple((name, handler)
                     for name, handler in self._handlers()
                     if name != 'filters')

    # for IDE completion
    handler_fields = None  # type: handlers.MongoFields
    handler_embed = None  # type: handlers.MongoEmbed
    handler_sort = None  # type: handlers.MongoSort
    handler_filters = None  # type: handlers.MongoFilter
    handler_pagination = None  # type: handlers.MongoPagination

    def _init_query_options_handlers(self):
        """ Initialize every Query Options handler """
        for name in self.HANDLER_NAMES:
            handler_attr_name = 'handler_' + name
            handler_cls = getattr(self, '_QO_HANDLER_' + name.upper())

            setattr(self, handler_attr_name,
                    self._init_handler(name, handler_cls).with_mongofilter(self))

        # Check settings
        self._handler_settings.raise_if_invalid_handler_settings(self)

    def _init_handler(self, handler_name, handler_cls):
        """ Init a handler, and load its settings """
        handler_settings = self._handler_settings.get_settings(handler_name, handler_cls)
        return handler_cls(self._model, **handler_settings)

    def _raise_if_handler_is_not_enabled(self, handler_name):
        """ Raise an error if a handler is not enabled """
        self._handler_settings.raise_if_not_handler_enabled(
            getattr(self._model, '__name__', repr(self._model)),
            handler_name)

    # endregion


# region Entry points for any model

def filter_documents(model, *args, extra_fields=None, handler_settings=None):
    """ Load documents of any model that provides find() and find_one()

        Same as MongoFilterBase.filter(), for models that don't use the mixin:

            filter_documents(model, query_options, callback)

        :param model: The model. See MongoFilterQuery
        :param args: See resolve_filter_arguments()
        :param extra_fields: Field names to append to the projection
        :param handler_settings: See MongoFilterSettingsDict
    """
    return MongoFilterQuery(model, handler_settings).filter(*args, extra_fields=extra_fields)


def filter_one(model, identifier, conditions=None, callback=None, extra_fields=None, handler_settings=None):
    """ Load a single document of any model by its identifier """
    return MongoFilterQuery(model, handler_settings).filter_one(identifier, conditions, callback,
                                                                extra_fields=extra_fields)


def filter_many(model, conditions=None, callback=None, extra_fields=None, handler_settings=None):
    """ Load a collection of documents of any model """
    return MongoFilterQuery(model, handler_settings).filter_many(conditions, callback,
                                                                 extra_fields=extra_fields)

# endregion

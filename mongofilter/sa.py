from copy import copy

from sqlalchemy.orm import Session

from .docquery import DocumentQuery
from .query import MongoFilterQuery


class MongoFilterBase:
    """ Mixin for SqlAlchemy models that provides the .filter() method, and a Mongoose-like find()

        Example:

            Base = declarative_base(cls=MongoFilterBase)

            class Role(Base):
                ...

            Base.mongofilter_bind(ssn)
            Role.filter({'sort': ['-points']}, lambda err, roles: ...)
    """

    #: The Session (or scoped_session) that queries are executed with
    _mongofilter_session = None

    @classmethod
    def mongofilter_bind(cls, session):
        """ Bind models to a Session

            When called on the declarative base, all models are bound.

            :param session: Session, or scoped_session
        """
        cls._mongofilter_session = session
        return session

    @classmethod
    def _get_mongofilter_session(cls):
        ssn = cls._mongofilter_session
        if ssn is None or isinstance(ssn, Session):
            return ssn
        return ssn()  # scoped_session

    # Override this method in your subclass in order to be able to configure MongoFilter on a per-model basis!
    @classmethod
    def _init_mongofilter(cls, handler_settings: dict = None) -> MongoFilterQuery:
        """ Get a reusable MongoFilterQuery object. Is only invoked once.

            Override this method in order to initialize MongoFilterQuery they way you need.
            For example, you might want to pass `handler_settings` dict to it.
        """
        return MongoFilterQuery(cls, handler_settings=handler_settings)

    __mongofilter_per_class_cache = {}

    @classmethod
    def _get_mongofilter(cls) -> MongoFilterQuery:
        """ Get a copy of this model's MongoFilterQuery ; initialize it only once """
        try:
            # Every model class has its own MongoFilterQuery, and no one inherits it.
            mq = cls.__mongofilter_per_class_cache[cls]
        except KeyError:
            cls.__mongofilter_per_class_cache[cls] = mq = cls._init_mongofilter()

        return copy(mq)

    @classmethod
    def mongofilter_configure(cls, handler_settings: dict) -> MongoFilterQuery:
        """ Initialize this models' MongoFilterQuery settings and make it permanent.

            :param handler_settings: a dict of settings. See MongoFilterSettingsDict
        """
        mq = cls._init_mongofilter(handler_settings)
        cls.__mongofilter_per_class_cache[cls] = mq
        return mq

    @classmethod
    def mongofilter(cls) -> MongoFilterQuery:
        """ Get a MongoFilterQuery for this model, ready for query() """
        return cls._get_mongofilter()

    # region Query builder

    @classmethod
    def find(cls, predicate: dict = None) -> DocumentQuery:
        """ Find documents that match MongoDB criteria. No criteria: all documents """
        return DocumentQuery(cls, predicate, session=cls._get_mongofilter_session())

    @classmethod
    def find_one(cls, predicate: dict) -> DocumentQuery:
        """ Find the first document that matches MongoDB criteria """
        return DocumentQuery(cls, predicate, one=True, session=cls._get_mongofilter_session())

    # endregion

    # region Entry points

    @classmethod
    def filter(cls, *args, extra_fields=None):
        """ Load documents using Query Options

            Model.filter()
            Model.filter(callback)
            Model.filter(identifier | query_options)
            Model.filter(identifier | query_options, callback)
            Model.filter(identifier, query_options)
            Model.filter(identifier, query_options, callback)

            Without a callback, returns a DocumentQuery to exec() later.
            With a callback, executes the query and calls callback(error, result).
        """
        return cls._get_mongofilter().filter(*args, extra_fields=extra_fields)

    @classmethod
    def filter_one(cls, identifier, conditions: dict = None, callback=None, extra_fields=None):
        """ Load a single document by its identifier """
        return cls._get_mongofilter().filter_one(identifier, conditions, callback, extra_fields=extra_fields)

    @classmethod
    def filter_many(cls, conditions: dict = None, callback=None, extra_fields=None):
        """ Load a collection of documents """
        return cls._get_mongofilter().filter_many(conditions, callback, extra_fields=extra_fields)

    # endregion

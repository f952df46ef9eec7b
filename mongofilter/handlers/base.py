from ..exc import InvalidInputError


class MongoFilterHandlerBase:
    """ An implementation of a handler for MongoFilterQuery

        Every subclass will handle a single section of the Query Options
    """

    #: Name of the Query Options section that this object is capable of handling
    query_object_section_name = None

    def __init__(self, model):
        """ Initialize the Query Options section handler with a model.

        This method does *not* receive any input data just yet, with the purpose of having an
        object that can be extended with some interesting defaults right at init time.

        :param model: The model it's being applied to. Anything that provides find() and find_one().

        NOTE: Any arguments that have default values will be treated as handler settings!!
        """
        #: The model to handle the Query Options for
        self.model = model

        # Has the input() method been called already?
        self.input_received = False
        self.input_value = None

        #: MongoFilterQuery bound to this object. It may remain uninitialized.
        self.mongofilter = None

    def with_mongofilter(self, mongofilter):
        """ Bind this object with a MongoFilterQuery

            :type mongofilter: mongofilter.query.MongoFilterQuery
        """
        self.mongofilter = mongofilter
        return self

    def __copy__(self):
        """ Handlers are reusable in their state before input() is called """
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update(self.__dict__)
        return result

    def input(self, qo_value):
        """ Get a section of the Query Options.

        The purpose of this method is to receive the input, validate it, and compile it,
        so that every error is raised before the query is ever built.

        :param qo_value: the value of the Query Options section it's handling
        :rtype: MongoFilterHandlerBase
        :raises InvalidQueryError
        """
        self.input_value = qo_value  # no copying. Try not to modify it.

        # Set the flag
        self.input_received = True

        # Make sure that input() can only be used once
        self.input = self.__raise_input_not_reusable

        return self

    def __raise_input_not_reusable(self, *args, **kwargs):
        raise RuntimeError("You can't use the {}.input() method twice. "
                           "copy() the handler!"
                           .format(self.__class__.__name__))

    def _raise_if_not_list(self, value, message=None):
        if not isinstance(value, (list, tuple)):
            raise InvalidInputError(message or '{} must be an array, {} given'
                                    .format(self.query_object_section_name, type(value).__name__))

    def compile(self):
        """ Compile the input into the form that the query builder understands """
        raise NotImplementedError()

    def alter_query(self, query):
        """ Alter the given query handle and apply the Query Options section this handler is handling

        :param query: The query handle to apply the section to (see mongofilter.docquery.DocumentQuery)
        :return: the query handle
        """
        raise NotImplementedError()

    def get_final_input_value(self):
        """ Get the final input of the handler """
        return self.input_value

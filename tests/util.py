from sqlalchemy import event


class RecordedQuery:
    """ A query handle that records every call made to it

        Mimics mongofilter.docquery.DocumentQuery, without a database
    """

    def __init__(self, model, *call):
        self.model = model
        self.calls = [call]

    def _record(self, *call):
        self.calls.append(call)
        return self

    def select(self, projection):
        return self._record('select', projection)

    def populate(self, relation, fields=None):
        return self._record('populate', relation, fields)

    def sort(self, spec):
        return self._record('sort', dict(spec))

    def limit(self, n):
        return self._record('limit', n)

    def skip(self, n):
        return self._record('skip', n)

    def exec(self, callback=None):
        self._record('exec')
        if callback is None:
            if self.model.error is not None:
                raise self.model.error
            return self.model.result

        callback(self.model.error, None if self.model.error is not None else self.model.result)


class RecordingModel:
    """ A fake model: find() and find_one() produce RecordedQuery handles

        :param result: What exec() gives
        :param error: The error exec() fails with
    """

    def __init__(self, result=None, error=None):
        self.__name__ = 'RecordingModel'
        self.result = result
        self.error = error

        #: Every query handle that was requested
        self.queries = []

    def find(self, predicate=None):
        q = RecordedQuery(self, 'find', predicate)
        self.queries.append(q)
        return q

    def find_one(self, predicate):
        q = RecordedQuery(self, 'find_one', predicate)
        self.queries.append(q)
        return q

    @property
    def calls(self):
        """ Calls made to the one and only query handle """
        assert len(self.queries) == 1, 'Expected exactly one query, got {}'.format(len(self.queries))
        return self.queries[0].calls


class CallbackRecorder:
    """ A callback(error, result) that remembers how it was called """

    def __init__(self):
        self.calls = []

    def __call__(self, error, result):
        self.calls.append((error, result))

    @property
    def error(self):
        assert len(self.calls) == 1, 'The callback was called {} times'.format(len(self.calls))
        return self.calls[0][0]

    @property
    def result(self):
        assert len(self.calls) == 1, 'The callback was called {} times'.format(len(self.calls))
        return self.calls[0][1]


class QueryCounter:
    """ Counts the number of queries executed on the given engine """

    def __init__(self, engine):
        self.engine = engine
        self.n = 0

    def start_logging(self):
        event.listen(self.engine, "after_cursor_execute", self._after_cursor_execute_event_handler, named=True)

    def stop_logging(self):
        event.remove(self.engine, "after_cursor_execute", self._after_cursor_execute_event_handler)

    def _after_cursor_execute_event_handler(self, **kw):
        self.n += 1

    # Context manager

    def __enter__(self):
        self.start_logging()
        return self

    def __exit__(self, *exc):
        self.stop_logging()
        return False

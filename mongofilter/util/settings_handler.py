from .inspect import pluck_kwargs_from
from ..exc import DisabledError


class MongoFilterSettingsHandler:
    """ Settings keeper for MongoFilterQuery

        This is essentially a helper which will feed the correct kwargs to every class.

        Query Options handlers receive settings as kwargs to their __init__() methods,
        and those kwargs have unique names.

        This class will collect all settings as a single, flat dict,
        and give each handler only the settings it wants.
    """

    def __init__(self, settings: dict):
        """ Store the settings for every handler

            :param settings: dict of handler kwargs
        """
        if not isinstance(settings, dict):
            raise TypeError('Handler settings must be a dict, {} given'.format(type(settings)))

        #: Settings dict
        self._settings = settings  # not copied: never modified

        #: Handler names
        self._handler_names = set()

        #: all kwargs names (to identify invalid ones)
        self._all_known_kwargs_names = set()

        #: disabled handler names
        self._disabled_handlers = set()

    def get_settings(self, handler_name: str, handler_cls: type) -> dict:
        """ Get settings for the given handler

            The handler's __init__() is analyzed: every keyword argument with a default value
            is a setting. Matching keys are taken from the settings dict; the rest use the defaults.

            If the settings contain `<handler_name>_enabled=False`, the handler is disabled.
        """
        if not self._settings.get('{}_enabled'.format(handler_name), True):
            self._disabled_handlers.add(handler_name)

        kwargs = pluck_kwargs_from(self._settings, for_func=handler_cls.__init__)

        self._handler_names.add(handler_name)
        self._all_known_kwargs_names.update(kwargs.keys())

        return kwargs

    def is_handler_enabled(self, handler_name: str) -> bool:
        """ Test if the handler is enabled in the configuration """
        return handler_name not in self._disabled_handlers

    def raise_if_not_handler_enabled(self, model_name: str, handler_name: str):
        """ Raise an error if the handler is not enabled """
        if not self.is_handler_enabled(handler_name):
            raise DisabledError('Query options section "{}" is disabled for "{}"'
                                .format(handler_name, model_name))

    def raise_if_invalid_handler_settings(self, mongofilter):
        """ Check whether there were any typos in setting names

            Must be called after every handler has been initialized with get_settings().

            :raises: KeyError: Invalid settings provided
        """
        known_keys = set('{}_enabled'.format(handler_name)
                         for handler_name in self._handler_names)
        known_keys |= self._all_known_kwargs_names

        invalid_keys = set(self._settings.keys()) - known_keys
        if invalid_keys:
            raise KeyError('Invalid settings were provided for {!r}: {}'
                           .format(mongofilter, ','.join(sorted(invalid_keys))))

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self._settings)

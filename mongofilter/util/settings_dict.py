from typing import Callable, Iterable, Mapping


class MongoFilterSettingsDict(dict):
    """ MongoFilterQuery settings container.

        Is only used for nice autocompletion and documentation purposes.

        The keyword settings in this object are just plain kwargs names
        for every handler object's __init__ method,
        which are fed to subclasses of MongoFilterHandlerBase by MongoFilterSettingsHandler.

        In addition to that, there are '<section>_enabled' settings,
        that can enable or disable a Query Options section.
    """

    def __init__(self,
                 # --- fields
                 force_include: Iterable[str] = None,
                 # --- filters
                 operators: Mapping[str, Callable] = None,
                 # --- pagination
                 default_page: int = 1,
                 default_size: int = 30,
                 max_size: int = None,
                 # --- enabled sections?
                 fields_enabled: bool = True,
                 embed_enabled: bool = True,
                 filters_enabled: bool = True,
                 sort_enabled: bool = True,
                 pagination_enabled: bool = True,
                 ):
        """ Settings for MongoFilterQuery

        # Fields

        * force_include: Field names appended to every non-empty projection.
            Use it for fields your application code needs even when the API user has not asked for them.

        # Filters

        * operators: Additional filter operators: a mapping { token: callable(key, value) -> dict }.
            The callable returns the MongoDB criteria contributed by the clause, e.g.:

                operators={'^': lambda key, value: {key: re.compile('^' + re.escape(value))}}

            Built-in operators can't be replaced.

        # Pagination

        * default_page: Page used when none (or zero) is given. Pages are 1-based.
        * default_size: Page size used when none (or zero) is given.
        * max_size: The largest page size a user can ask for. Larger values are capped.

        # Enabled Sections

        * fields_enabled, embed_enabled, filters_enabled, sort_enabled, pagination_enabled:
            Set to `False` to reject any input for that section with a DisabledError.
        """
        kwargs = {k: v for k, v in locals().items() if k not in ('self', '__class__')}
        super(MongoFilterSettingsDict, self).__init__(**kwargs)

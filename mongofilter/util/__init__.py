from .identifier import is_document_identifier, new_document_identifier
from .settings_handler import MongoFilterSettingsHandler
from .settings_dict import MongoFilterSettingsDict
from .inspect import pluck_kwargs_from

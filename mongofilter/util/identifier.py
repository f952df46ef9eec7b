import re
import secrets

#: A document identifier: 12 bytes, hex-encoded
DOCUMENT_IDENTIFIER_RE = re.compile(r'[a-fA-F0-9]{24}')


def is_document_identifier(value) -> bool:
    """ Test whether a value looks like a document identifier

        Only a string of exactly 24 hexadecimal characters (any case) qualifies.
        This is how filter() tells `Model.filter('5b0e...')` from `Model.filter({...})`
    """
    return isinstance(value, str) and DOCUMENT_IDENTIFIER_RE.fullmatch(value) is not None


def new_document_identifier() -> str:
    """ Generate a random document identifier """
    return secrets.token_hex(12)

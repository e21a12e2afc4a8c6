import functools
import re

from .errors import ConcernError

_invalid_names = re.compile(r'[/\. "$*<>:|?]')
_invalid_collection_names = re.compile(r'[$]')


def ok_name(name):
    """
    In-line with MongoDB restrictions on database names.
    https://docs.mongodb.com/manual/reference/limits/#std-label-restrictions-on-db-names
    """
    if not name or not isinstance(name, str):
        return False
    if _invalid_names.search(name):
        return False
    if len(name) > 64:
        return False
    return True


def ok_collection_name(name):
    """
    Collection names may contain dots but not '$' and cannot be empty.
    https://docs.mongodb.com/manual/reference/limits/#Restriction-on-Collection-Names
    """
    if not name or not isinstance(name, str):
        return False
    if _invalid_collection_names.search(name) or name.startswith('.') \
       or name.endswith('.'):
        return False
    return True


def get_typed(doc, key, types):
    """
    Return doc[key] if present and of one of the given types, else None.
    Booleans are not accepted where an int is asked for.

    :param doc Mapping:
    :param key str:
    :param types type|tuple[type]:
    :rtype: object|None
    """
    if not isinstance(types, tuple):
        types = (types,)
    value = doc.get(key)
    if value is None:
        return None
    if isinstance(value, bool) and bool not in types:
        return None
    if isinstance(value, types):
        return value
    return None


def first_present(doc, keys, types):
    """
    Ordered lookup across alternative spellings of the same field.
    The first key holding a value of the right type wins.

    :param doc Mapping:
    :param keys tuple[str]:
    :param types type|tuple[type]:
    :rtype: object|None
    """
    for key in keys:
        value = get_typed(doc, key, types)
        if value is not None:
            return value
    return None


def support_alert(func):
    """
    Provide smart tips if the user tries to use un-implemented / deprecated
    known kwargs.
    """
    @functools.wraps(func)
    def inner(*args, **kwargs):
        for k in kwargs:
            if k not in func.__code__.co_varnames:
                raise ConcernError("The argument %r is not supported by %r in rwconcern. "
                                   "This may or may not be supported in PyMongo." %
                                   (k, func))
        return func(*args, **kwargs)
    return inner

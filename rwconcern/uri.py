import logging

import pymongo.errors
from pymongo.uri_parser import parse_uri

from .errors import ValidationError
from .read_concern import ReadConcern
from .write_concern import WriteConcern

logger = logging.getLogger(__name__)

DEFAULT_URI = 'mongodb://localhost:27017'

_WRITE_CONCERN_OPTIONS = ('w', 'journal', 'wtimeoutMS')


def parse(uri):
    """
    Parse and validate a connection string with pymongo's parser.

    :param uri str:
    :rtype: dict
    """
    try:
        return parse_uri(uri)
    except (ValueError, TypeError, pymongo.errors.ConfigurationError) as ex:
        raise ValidationError("Invalid connection string %r: %s" % (uri, ex)) from ex


def concerns_from_options(options):
    """
    Map parsed URI options onto concerns. Option names are matched without
    regard to case. pymongo's spelling of the keys differs between releases
    ('wtimeoutMS' vs 'wTimeoutMS') and its options may be a plain dict.

    :param options Mapping:
    :returns: (read_concern, write_concern)
    :rtype: (ReadConcern, WriteConcern)
    """
    lowered = {k.lower(): v for k, v in options.items()}
    rc_doc = {}
    if lowered.get('readconcernlevel') is not None:
        rc_doc['level'] = lowered['readconcernlevel']
    wc_doc = {}
    for key in _WRITE_CONCERN_OPTIONS:
        if lowered.get(key.lower()) is not None:
            wc_doc[key] = lowered[key.lower()]
    return ReadConcern.from_document(rc_doc), WriteConcern.from_document(wc_doc)


def concerns_from_uri(uri):
    """
    :param uri str: e.g. 'mongodb://localhost/?w=majority&readConcernLevel=local'
    :returns: (read_concern, write_concern)
    :rtype: (ReadConcern, WriteConcern)
    """
    parsed = parse(uri)
    read_concern, write_concern = concerns_from_options(parsed['options'])
    logger.debug("Connection string concerns: %r %r", read_concern, write_concern)
    return read_concern, write_concern

import pymongo.errors
import pymongo.write_concern
from bson.son import SON

from .common import first_present, get_typed
from .errors import SerializationError, ValidationError
from .resolver import WRITE_CONCERN_RESOLVER

_MAX_INT32 = 2 ** 31 - 1

# Alternative spellings, in lookup order
_JOURNAL_KEYS = ('journal', 'j')
_WTIMEOUT_KEYS = ('wtimeoutMS', 'wtimeout')


def _validate_int(name, value):
    """
    w and wtimeout_ms must be non-negative int32s. Booleans are rejected even
    though they are ints in Python.

    :param name str:
    :param value int|None:
    :rtype: None
    """
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("%s must be an integer, not %r" % (name, type(value)))
    if value < 0:
        raise ValidationError("%s must be greater than or equal to 0, not %d" % (name, value))
    if value > _MAX_INT32:
        raise ValidationError("%s must fit in a 32-bit integer, not %d" % (name, value))


class WriteConcern():
    """
    An immutable MongoDB write concern.

    :param w int|None: number of nodes that must acknowledge the write
    :param journal bool|None: wait for the journal commit
    :param wtimeout_ms int|None: give up waiting after this many milliseconds
    :param tag str|None: tagged nodes that must acknowledge the write.
                         Only one of w and tag may be set.
    """

    FIELD = 'writeConcern'

    def __init__(self, w=None, journal=None, wtimeout_ms=None, tag=None):
        if w is not None and tag is not None:
            raise ValidationError("Only one of w and tag may be set on a WriteConcern")
        _validate_int('w', w)
        _validate_int('wtimeout_ms', wtimeout_ms)
        if journal is not None and not isinstance(journal, bool):
            raise ValidationError("journal must be a bool, not %r" % type(journal))
        if tag is not None and (not isinstance(tag, str) or not tag):
            raise ValidationError("tag must be a non-empty string, not %r" % (tag,))
        try:
            self.__write_concern = pymongo.write_concern.WriteConcern(
                w=w if tag is None else tag, wtimeout=wtimeout_ms, j=journal)
        except (TypeError, ValueError, pymongo.errors.ConfigurationError) as ex:
            raise ValidationError("Invalid combination of WriteConcern options: %s"
                                  % ex) from ex

    @classmethod
    def from_document(cls, doc):
        """
        Build a WriteConcern from a document such as a parsed connection
        string or a 'writeConcern' command field.

        'w' is a tag when it is a string and a node count when it is an int.
        The journal flag may be spelled 'journal' or 'j' and the timeout
        'wtimeoutMS' or 'wtimeout'; the first present wins.

        :param doc Mapping:
        :rtype: WriteConcern
        """
        tag = get_typed(doc, 'w', str)
        w = get_typed(doc, 'w', int)
        if w is None and tag is None and doc.get('w') is not None:
            raise ValidationError("w must be an integer or a string, not %r"
                                  % type(doc['w']))
        journal = first_present(doc, _JOURNAL_KEYS, bool)
        wtimeout_ms = first_present(doc, _WTIMEOUT_KEYS, int)
        if tag is not None:
            return cls(journal=journal, tag=tag, wtimeout_ms=wtimeout_ms)
        return cls(w=w, journal=journal, wtimeout_ms=wtimeout_ms)

    @classmethod
    def from_pymongo(cls, write_concern):
        """
        Copy a pymongo.write_concern.WriteConcern. The original is not shared.

        :param write_concern pymongo.write_concern.WriteConcern:
        :rtype: WriteConcern
        """
        return cls.from_document(write_concern.document)

    def to_pymongo(self):
        return pymongo.write_concern.WriteConcern(**self.__write_concern.document)

    @property
    def w(self):
        w = self.__write_concern.document.get('w')
        if isinstance(w, int):
            return w
        return None

    @property
    def tag(self):
        w = self.__write_concern.document.get('w')
        if isinstance(w, str):
            return w
        return None

    @property
    def journal(self):
        return self.__write_concern.document.get('j')

    @property
    def wtimeout_ms(self):
        return self.__write_concern.document.get('wtimeout')

    @property
    def acknowledged(self):
        return self.__write_concern.acknowledged

    @property
    def is_server_default(self):
        return self.__write_concern.is_server_default

    @property
    def document(self):
        """
        The {'w', 'j', 'wtimeout'} fragment. Mutating it does not mutate
        this WriteConcern.

        :rtype: SON
        """
        doc = SON()
        if self.tag is not None:
            doc['w'] = self.tag
        elif self.w is not None:
            doc['w'] = self.w
        if self.journal is not None:
            doc['j'] = self.journal
        if self.wtimeout_ms is not None:
            doc['wtimeout'] = self.wtimeout_ms
        return doc

    def append_to(self, doc):
        """
        Write this concern into doc under 'writeConcern'.

        :param doc MutableMapping:
        :returns: doc
        :rtype: MutableMapping
        """
        try:
            doc[self.FIELD] = self.document
        except (TypeError, AttributeError, KeyError) as ex:
            raise SerializationError("Error appending WriteConcern to document %r"
                                     % (doc,)) from ex
        return doc

    @staticmethod
    def resolve_for_append(write_concern, caller_write_concern, opts=None):
        """
        Return the options document an operation should send, given the
        operation's own write concern (or None) and the caller's.

        :param write_concern WriteConcern|None:
        :param caller_write_concern WriteConcern:
        :param opts MutableMapping|None:
        :rtype: MutableMapping|None
        """
        return WRITE_CONCERN_RESOLVER.resolve(write_concern, caller_write_concern, opts)

    def __copy__(self):
        return WriteConcern.from_pymongo(self.__write_concern)

    def __deepcopy__(self, memo):
        return self.__copy__()

    def __eq__(self, other):
        if isinstance(other, WriteConcern):
            return self.document.to_dict() == other.document.to_dict()
        return NotImplemented

    def __hash__(self):
        return hash((WriteConcern, tuple(sorted(self.document.items()))))

    def __repr__(self):
        return "WriteConcern(%s)" % ", ".join("%s=%r" % kv for kv in self.document.items())

    def __str__(self):
        return str(self.document.to_dict())

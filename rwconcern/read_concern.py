import enum

import pymongo.errors
import pymongo.read_concern
from bson.son import SON

from .common import get_typed
from .errors import SerializationError, ValidationError
from .resolver import READ_CONCERN_RESOLVER


class ReadConcernLevel(str, enum.Enum):
    LOCAL = 'local'
    AVAILABLE = 'available'
    MAJORITY = 'majority'
    LINEARIZABLE = 'linearizable'
    SNAPSHOT = 'snapshot'


_LEVELS = frozenset(level.value for level in ReadConcernLevel)


class ReadConcern():
    """
    An immutable MongoDB read concern.

    A ReadConcern with no level is the server default. Passed explicitly to
    an operation it still overrides an ancestor's non-default level, which is
    different from passing nothing at all (see resolve_for_append).

    :param level ReadConcernLevel|str|None:
    """

    FIELD = 'readConcern'

    def __init__(self, level=None):
        if isinstance(level, ReadConcernLevel):
            level = level.value
        if level is not None:
            if not isinstance(level, str):
                raise ValidationError("Read concern level must be a string, not %r"
                                      % type(level))
            if level not in _LEVELS:
                raise ValidationError("Failed to set read concern level to %r. "
                                      "Valid levels are %s." %
                                      (level, ', '.join(sorted(_LEVELS))))
        try:
            self.__read_concern = pymongo.read_concern.ReadConcern(level)
        except (TypeError, ValueError, pymongo.errors.ConfigurationError) as ex:
            raise ValidationError("Invalid read concern level %r" % level) from ex

    @classmethod
    def from_document(cls, doc):
        """
        Build a ReadConcern from a document with an optional 'level' key.
        A missing level gives the unset concern.

        :param doc Mapping:
        :rtype: ReadConcern
        """
        return cls(get_typed(doc, 'level', str))

    @classmethod
    def from_pymongo(cls, read_concern):
        """
        Copy a pymongo.read_concern.ReadConcern. The original is not shared.

        :param read_concern pymongo.read_concern.ReadConcern:
        :rtype: ReadConcern
        """
        return cls(read_concern.level)

    def to_pymongo(self):
        return pymongo.read_concern.ReadConcern(self.level)

    @property
    def level(self):
        return self.__read_concern.level

    @property
    def is_server_default(self):
        return self.level is None

    @property
    def document(self):
        return self.__read_concern.document

    def append_to(self, doc):
        """
        Write this concern into doc under 'readConcern'. An unset concern
        writes an empty sub-document.

        :param doc MutableMapping:
        :returns: doc
        :rtype: MutableMapping
        """
        fragment = SON()
        if self.level is not None:
            fragment['level'] = self.level
        try:
            doc[self.FIELD] = fragment
        except (TypeError, AttributeError, KeyError) as ex:
            raise SerializationError("Error appending read concern to document %r"
                                     % (doc,)) from ex
        return doc

    @staticmethod
    def resolve_for_append(read_concern, caller_read_concern, opts=None):
        """
        Return the options document an operation should send, given the
        operation's own read concern (or None) and the caller's.

        :param read_concern ReadConcern|None:
        :param caller_read_concern ReadConcern:
        :param opts MutableMapping|None:
        :rtype: MutableMapping|None
        """
        return READ_CONCERN_RESOLVER.resolve(read_concern, caller_read_concern, opts)

    def __copy__(self):
        return ReadConcern.from_pymongo(self.__read_concern)

    def __deepcopy__(self, memo):
        return self.__copy__()

    def __eq__(self, other):
        if isinstance(other, ReadConcern):
            return self.level == other.level
        return NotImplemented

    def __hash__(self):
        return hash((ReadConcern, self.level))

    def __repr__(self):
        if self.level:
            return "ReadConcern(%r)" % self.level
        return "ReadConcern()"

    def __str__(self):
        return str(self.document)


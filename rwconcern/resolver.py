"""
Deciding whether an operation's concern belongs in its command.

Every level of the client hierarchy has an effective read and write concern.
An operation may carry its own. The rules are:

1. The operation has no concern of its own: the options are returned as-is.
   The caller's concern applies contextually and is not restated.
2. The operation's concern and the caller's are both the server default:
   the options are returned as-is. Stating a default changes nothing and the
   command stays minimal.
3. Otherwise the operation's concern is appended, creating the options
   document if there was none.

An explicit default concern (e.g. ReadConcern()) is not the same as no
concern. Against a non-default caller it falls under rule 3 and appends an
empty concern sub-document, forcing the server default.
"""

import logging

from bson.son import SON

logger = logging.getLogger(__name__)


class ConcernResolver():
    """
    One instance per concern type. Concerns are duck-typed on
    `is_server_default` and `append_to(doc)`.

    :param name str: the command field the concern is written under
    """

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return "ConcernResolver(%r)" % self.name

    def is_redundant(self, concern, caller_concern):
        """
        :param concern ReadConcern|WriteConcern|None:
        :param caller_concern ReadConcern|WriteConcern:
        :rtype: bool
        """
        if concern is None:
            return True
        return caller_concern.is_server_default and concern.is_server_default

    def resolve(self, concern, caller_concern, opts=None):
        """
        Return the options document to send for an operation.

        :param concern ReadConcern|WriteConcern|None: the operation's own concern
        :param caller_concern ReadConcern|WriteConcern: the effective concern
                                                        of the issuing object
        :param opts MutableMapping|None: options built so far
        :rtype: MutableMapping|None
        """
        if self.is_redundant(concern, caller_concern):
            logger.debug("Omitting %s (operation=%r, caller=%r)",
                         self.name, concern, caller_concern)
            return opts
        if opts is None:
            opts = SON()
        logger.debug("Appending %s %r (caller=%r)", self.name, concern, caller_concern)
        return concern.append_to(opts)


READ_CONCERN_RESOLVER = ConcernResolver('readConcern')
WRITE_CONCERN_RESOLVER = ConcernResolver('writeConcern')

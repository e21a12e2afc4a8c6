import copy

import bson

from .command import build_command, dispatch, effective_write_concern
from .command_cursor import CommandCursor
from .common import support_alert
from .errors import ConcernError, ConcernNotImplementedError, InvalidName, ValidationError
from .read_concern import ReadConcern
from .results import InsertOneResult, InsertManyResult, DeleteResult, UpdateResult
from .write_concern import WriteConcern


def _validate_filter(filter):
    """
    Validate the 'filter' parameter.

    :param filter dict:
    :rtype: None
    """
    if not isinstance(filter, dict):
        raise ConcernError("The filter parameter must be a dict, not %r" % type(filter))
    for k in filter.keys():
        if not isinstance(k, str):
            raise ConcernError("Filter keys must be strings, not %r" % type(k))


def _validate_update(update):
    """
    Validate the 'update' parameter. Either operators or a pipeline.

    :param update dict|list:
    :rtype: None
    """
    if isinstance(update, list):
        return
    if not isinstance(update, dict) or not update:
        raise ConcernError("The update parameter must be a non-empty dict or list, "
                           "not %r" % (update,))
    for k in update.keys():
        if not k.startswith('$'):
            raise ConcernError("In update operations, every key must be an update "
                               "operator. Got %r." % k)


def _validate_doc(doc):
    """
    Validate the 'doc' parameter.

    :param doc dict:
    :rtype: None
    """
    if not isinstance(doc, dict):
        raise ConcernError("The document must be a dict, not %r" % type(doc))
    for k in doc.keys():
        if not k or k.startswith('$'):
            raise InvalidName("All document keys must be truthy and cannot start with '$'.")


def _with_id(doc):
    doc = copy.deepcopy(doc)
    if doc.get('_id') is None:
        doc['_id'] = bson.ObjectId()
    return doc


class Collection():
    UNIMPLEMENTED = ['aggregate_raw_batches', 'bulk_write', 'codec_options',
                     'create_index', 'create_indexes', 'drop_index', 'drop_indexes',
                     'estimated_document_count', 'find_one_and_delete',
                     'find_one_and_replace', 'find_one_and_update', 'find_raw_batches',
                     'index_information', 'list_indexes', 'options',
                     'read_preference', 'rename', 'watch']
    DEPRECATED = ['reindex', 'parallel_scan', 'initialize_unordered_bulk_op',
                  'initialize_ordered_bulk_op', 'group', 'count', 'insert', 'save',
                  'update', 'remove', 'find_and_modify', 'ensure_index',
                  'map_reduce', 'inline_map_reduce']

    def __init__(self, collection_name, database, read_concern=None, write_concern=None):
        """
        A collection takes a snapshot of the database's concerns unless it is
        given its own.

        :param collection_name str:
        :param database Database:
        :param read_concern ReadConcern|None:
        :param write_concern WriteConcern|None:
        """
        self.name = collection_name
        self.database = database
        if read_concern is None:
            read_concern = database.read_concern
        if write_concern is None:
            write_concern = database.write_concern
        if not isinstance(read_concern, ReadConcern):
            raise ValidationError("read_concern must be a ReadConcern, not %r"
                                  % type(read_concern))
        if not isinstance(write_concern, WriteConcern):
            raise ValidationError("write_concern must be a WriteConcern, not %r"
                                  % type(write_concern))
        self._read_concern = read_concern
        self._write_concern = write_concern
        self._transport = database._transport

    def __repr__(self):
        return "Collection(%s, %r)" % (repr(self.database), self.name)

    def __getattr__(self, attr):
        """
        First check for deprecated / unimplemented.
        Then, MongoDB has this weird thing where there can be dots in a collection
        name.
        """
        if attr.startswith('_'):
            raise AttributeError(attr)
        if attr in self.DEPRECATED:
            raise ConcernNotImplementedError.create_depr("Collection", attr)
        if attr in self.UNIMPLEMENTED:
            raise ConcernNotImplementedError.create("Collection", attr)
        return Collection(self.name + '.' + attr, self.database,
                          read_concern=self._read_concern,
                          write_concern=self._write_concern)

    def __eq__(self, other):
        if isinstance(other, Collection):
            return self.database == other.database and self.name == other.name
        return NotImplemented

    def __hash__(self):
        return hash((self.database.name, self.name))

    @property
    def full_name(self):
        return '%s.%s' % (self.database.name, self.name)

    @property
    def read_concern(self):
        return self._read_concern

    @property
    def write_concern(self):
        return self._write_concern

    def with_options(self, read_concern=None, write_concern=None):
        """
        Get a clone of this collection. Unspecified concerns are inherited
        from this collection.

        :param read_concern ReadConcern|None:
        :param write_concern WriteConcern|None:
        :rtype: Collection
        """
        return Collection(self.name, self.database,
                          read_concern=read_concern or self._read_concern,
                          write_concern=write_concern or self._write_concern)

    def __command(self, command, read_concern=None, write_concern=None,
                  reads=False, writes=False):
        cmd = build_command(command, self, read_concern=read_concern,
                            write_concern=write_concern, reads=reads, writes=writes)
        return dispatch(self._transport, self.database.name, cmd)

    @support_alert
    def find(self, filter=None, limit=None, skip=None, read_concern=None):
        """
        Run a find command.

        :param filter dict:
        :param limit int:
        :param skip int:
        :param read_concern ReadConcern|None: overrides the collection's
        :rtype: command_cursor.CommandCursor
        """
        filter = filter or {}
        _validate_filter(filter)
        command = {'find': self.name, 'filter': filter}
        if limit:
            command['limit'] = limit
        if skip:
            command['skip'] = skip
        return CommandCursor(self.__command(command, read_concern=read_concern, reads=True))

    @support_alert
    def find_one(self, filter=None, read_concern=None):
        """
        :param filter dict:
        :param read_concern ReadConcern|None:
        :rtype: dict|None
        """
        filter = filter or {}
        _validate_filter(filter)
        command = {'find': self.name, 'filter': filter, 'limit': 1, 'singleBatch': True}
        for doc in CommandCursor(self.__command(command, read_concern=read_concern,
                                                reads=True)):
            return doc
        return None

    @support_alert
    def aggregate(self, pipeline, read_concern=None, write_concern=None):
        """
        Run an aggregation. A pipeline ending in $out or $merge writes and
        so also takes a write concern.

        :param pipeline list[dict]:
        :param read_concern ReadConcern|None:
        :param write_concern WriteConcern|None:
        :rtype: command_cursor.CommandCursor
        """
        if not isinstance(pipeline, list):
            raise ConcernError("The pipeline must be a list, not %r" % type(pipeline))
        writes = bool(pipeline) and any(k in ('$out', '$merge') for k in pipeline[-1])
        command = {'aggregate': self.name, 'pipeline': pipeline, 'cursor': {}}
        return CommandCursor(self.__command(command, read_concern=read_concern,
                                            write_concern=write_concern,
                                            reads=True, writes=writes))

    @support_alert
    def count_documents(self, filter, read_concern=None):
        """
        :param filter dict:
        :param read_concern ReadConcern|None:
        :rtype: int
        """
        _validate_filter(filter)
        command = {'count': self.name, 'query': filter}
        return self.__command(command, read_concern=read_concern, reads=True).get('n', 0)

    @support_alert
    def distinct(self, key, filter=None, read_concern=None):
        """
        :param key str:
        :param filter dict:
        :param read_concern ReadConcern|None:
        :rtype: list
        """
        if not isinstance(key, str):
            raise ConcernError("The distinct key must be a string, not %r" % type(key))
        filter = filter or {}
        _validate_filter(filter)
        command = {'distinct': self.name, 'key': key, 'query': filter}
        return self.__command(command, read_concern=read_concern, reads=True).get('values', [])

    @support_alert
    def insert_one(self, document, write_concern=None):
        """
        Insert a single document.

        :param document dict:
        :param write_concern WriteConcern|None:
        :rtype: results.InsertOneResult
        """
        _validate_doc(document)
        document = _with_id(document)
        command = {'insert': self.name, 'documents': [document]}
        self.__command(command, write_concern=write_concern, writes=True)
        wc = effective_write_concern(write_concern, self)
        return InsertOneResult(document['_id'], acknowledged=wc.acknowledged)

    @support_alert
    def insert_many(self, documents, ordered=True, write_concern=None):
        """
        Insert documents. If ordered, the server stops at the first error.

        :param list documents:
        :param bool ordered:
        :param write_concern WriteConcern|None:
        :rtype: results.InsertManyResult
        """
        if not isinstance(documents, list) or not documents:
            raise ConcernError("Documents must be a non-empty list")
        for doc in documents:
            _validate_doc(doc)
        documents = [_with_id(doc) for doc in documents]
        command = {'insert': self.name, 'documents': documents, 'ordered': ordered}
        self.__command(command, write_concern=write_concern, writes=True)
        wc = effective_write_concern(write_concern, self)
        return InsertManyResult(documents, acknowledged=wc.acknowledged)

    def __update(self, filter, update, upsert, multi, write_concern):
        _validate_filter(filter)
        _validate_update(update)
        statement = {'q': filter, 'u': update, 'upsert': upsert, 'multi': multi}
        command = {'update': self.name, 'updates': [statement]}
        reply = self.__command(command, write_concern=write_concern, writes=True)
        wc = effective_write_concern(write_concern, self)
        return UpdateResult(reply, acknowledged=wc.acknowledged)

    @support_alert
    def update_one(self, filter, update, upsert=False, write_concern=None):
        """
        :param filter dict:
        :param update dict|list:
        :param upsert bool:
        :param write_concern WriteConcern|None:
        :rtype: results.UpdateResult
        """
        return self.__update(filter, update, upsert, False, write_concern)

    @support_alert
    def update_many(self, filter, update, upsert=False, write_concern=None):
        """
        :param filter dict:
        :param update dict|list:
        :param upsert bool:
        :param write_concern WriteConcern|None:
        :rtype: results.UpdateResult
        """
        return self.__update(filter, update, upsert, True, write_concern)

    def __delete(self, filter, limit, write_concern):
        _validate_filter(filter)
        command = {'delete': self.name, 'deletes': [{'q': filter, 'limit': limit}]}
        reply = self.__command(command, write_concern=write_concern, writes=True)
        wc = effective_write_concern(write_concern, self)
        return DeleteResult(reply, acknowledged=wc.acknowledged)

    @support_alert
    def delete_one(self, filter, write_concern=None):
        """
        :param filter dict:
        :param write_concern WriteConcern|None:
        :rtype: results.DeleteResult
        """
        return self.__delete(filter, 1, write_concern)

    @support_alert
    def delete_many(self, filter, write_concern=None):
        """
        :param filter dict:
        :param write_concern WriteConcern|None:
        :rtype: results.DeleteResult
        """
        return self.__delete(filter, 0, write_concern)

    @support_alert
    def drop(self, write_concern=None):
        """
        Drop this collection.

        :param write_concern WriteConcern|None:
        :rtype: None
        """
        self.__command({'drop': self.name}, write_concern=write_concern, writes=True)
        self.database._cache.pop(self.name, None)

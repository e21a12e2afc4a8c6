from .collection import Collection
from .command import build_command, dispatch
from .command_cursor import CommandCursor
from .common import support_alert, ok_name, ok_collection_name
from .errors import ConcernNotImplementedError, InvalidName, ValidationError
from .read_concern import ReadConcern
from .write_concern import WriteConcern


class Database():
    UNIMPLEMENTED = ['codec_options', 'cursor_command', 'dereference', 'next',
                     'profiling_info', 'profiling_level', 'read_preference',
                     'set_profiling_level', 'validate_collection', 'watch']
    DEPRECATED = ['add_son_manipulator', 'add_user', 'authenticate', 'collection_names',
                  'current_op', 'error', 'eval', 'last_status', 'logout',
                  'previous_error', 'remove_user', 'reset_error_history', 'system_js']

    def __init__(self, db_name, client, read_concern=None, write_concern=None):
        """
        A database takes a snapshot of the client's concerns unless it is
        given its own. Later changes to the client never reach it.

        :param db_name str:
        :param client ConcernClient:
        :param read_concern ReadConcern|None:
        :param write_concern WriteConcern|None:
        """
        if not ok_name(db_name):
            raise InvalidName("Database cannot be named %r." % db_name)
        self.name = db_name
        self.client = client
        if read_concern is None:
            read_concern = client.read_concern
        if write_concern is None:
            write_concern = client.write_concern
        if not isinstance(read_concern, ReadConcern):
            raise ValidationError("read_concern must be a ReadConcern, not %r"
                                  % type(read_concern))
        if not isinstance(write_concern, WriteConcern):
            raise ValidationError("write_concern must be a WriteConcern, not %r"
                                  % type(write_concern))
        self._read_concern = read_concern
        self._write_concern = write_concern
        self._transport = client._transport
        self._cache = {}

    def __repr__(self):
        return "Database(%s, %r)" % (repr(self.client), self.name)

    def __getattr__(self, attr):
        if attr.startswith('_'):
            raise AttributeError(attr)
        if attr in self.UNIMPLEMENTED:
            raise ConcernNotImplementedError.create("Database", attr)
        if attr in self.DEPRECATED:
            raise ConcernNotImplementedError.create_depr("Database", attr)
        return self[attr]

    def __getitem__(self, collection_name):
        try:
            return self._cache[collection_name]
        except KeyError:
            coll = self.get_collection(collection_name)
            self._cache[collection_name] = coll
            return coll

    def __eq__(self, other):
        if isinstance(other, Database):
            return self.client is other.client and self.name == other.name
        return NotImplemented

    def __hash__(self):
        return hash(self.name)

    @property
    def read_concern(self):
        return self._read_concern

    @property
    def write_concern(self):
        return self._write_concern

    @support_alert
    def get_collection(self, name, read_concern=None, write_concern=None):
        """
        Get a collection without touching the server.

        :param name str:
        :param read_concern ReadConcern|None: defaults to this database's
        :param write_concern WriteConcern|None: defaults to this database's
        :rtype: Collection
        """
        if not ok_collection_name(name):
            raise InvalidName("Collection cannot be named %r." % name)
        return Collection(name, self, read_concern=read_concern,
                          write_concern=write_concern)

    @support_alert
    def create_collection(self, name, read_concern=None, write_concern=None):
        """
        Send a create command and return the new collection. The write
        concern, if given, applies to the create command and, with the read
        concern, to the returned collection.

        :param name str:
        :param read_concern ReadConcern|None:
        :param write_concern WriteConcern|None:
        :rtype: Collection
        """
        coll = self.get_collection(name, read_concern=read_concern,
                                   write_concern=write_concern)
        cmd = build_command({'create': name}, self, write_concern=write_concern,
                            writes=True)
        dispatch(self._transport, self.name, cmd)
        return coll

    @support_alert
    def with_options(self, read_concern=None, write_concern=None):
        """
        :param read_concern ReadConcern|None:
        :param write_concern WriteConcern|None:
        :rtype: Database
        """
        return Database(self.name, self.client,
                        read_concern=read_concern or self._read_concern,
                        write_concern=write_concern or self._write_concern)

    @support_alert
    def command(self, command, read_concern=None, write_concern=None):
        """
        Run an arbitrary command. Only the concerns passed here are
        considered. The database's own concerns are not added to a generic
        command.

        :param command str|dict: a command name or a full command document
        :param read_concern ReadConcern|None:
        :param write_concern WriteConcern|None:
        :rtype: dict
        """
        if isinstance(command, str):
            command = {command: 1}
        if not isinstance(command, dict) or not command:
            raise TypeError("command must be a non-empty dict or a string, not %r"
                            % (command,))
        cmd = build_command(command, self, read_concern=read_concern,
                            write_concern=write_concern, reads=True, writes=True,
                            inherit=False)
        return dispatch(self._transport, self.name, cmd)

    @support_alert
    def list_collection_names(self):
        """
        List every collection name.

        :rtype: list[str]
        """
        reply = dispatch(self._transport, self.name,
                         build_command({'listCollections': 1, 'nameOnly': True}, self))
        return [coll['name'] for coll in CommandCursor(reply)]

    @support_alert
    def drop_collection(self, name_or_collection, write_concern=None):
        """
        :param name_or_collection str|Collection:
        :param write_concern WriteConcern|None:
        :rtype: None
        """
        if isinstance(name_or_collection, Collection):
            name = name_or_collection.name
        else:
            name = name_or_collection
        cmd = build_command({'drop': name}, self, write_concern=write_concern, writes=True)
        dispatch(self._transport, self.name, cmd)
        self._cache.pop(name, None)

    @support_alert
    def drop(self, write_concern=None):
        """
        Drop this database.

        :param write_concern WriteConcern|None:
        :rtype: None
        """
        cmd = build_command({'dropDatabase': 1}, self, write_concern=write_concern,
                            writes=True)
        dispatch(self._transport, self.name, cmd)
        self.client._cache.pop(self.name, None)

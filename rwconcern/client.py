import logging

from .common import support_alert
from .database import Database
from .errors import ConcernNotImplementedError, ValidationError
from .read_concern import ReadConcern
from .transport import CommandRecorder
from .uri import DEFAULT_URI, parse, concerns_from_options
from .write_concern import WriteConcern

logger = logging.getLogger(__name__)


class ConcernClient():
    """
    The root of the concern hierarchy. Concerns come from the connection
    string and are overridden by explicit keyword arguments. Databases and
    collections handed out by the client snapshot these concerns.

    Commands go to `transport`, a callable (database_name, command) -> reply.
    Without one they are recorded by a CommandRecorder and nothing is sent.

    :param host str: a mongodb:// connection string
    :param read_concern ReadConcern|None:
    :param write_concern WriteConcern|None:
    :param transport callable|None:
    """
    UNIMPLEMENTED = ['HOST', 'PORT', 'address', 'arbiters', 'close_cursor',
                     'codec_options', 'event_listeners', 'get_default_database',
                     'is_mongos', 'is_primary', 'list_databases', 'nodes', 'primary',
                     'read_preference', 'retry_reads', 'retry_writes', 'secondaries',
                     'server_info', 'start_session', 'watch']

    def __init__(self, host=None, read_concern=None, write_concern=None, transport=None):
        self.host = host or DEFAULT_URI
        parsed = parse(self.host)
        self.nodelist = parsed['nodelist']
        uri_read_concern, uri_write_concern = concerns_from_options(parsed['options'])
        self._read_concern = read_concern if read_concern is not None else uri_read_concern
        self._write_concern = write_concern if write_concern is not None else uri_write_concern
        if not isinstance(self._read_concern, ReadConcern):
            raise ValidationError("read_concern must be a ReadConcern, not %r"
                                  % type(self._read_concern))
        if not isinstance(self._write_concern, WriteConcern):
            raise ValidationError("write_concern must be a WriteConcern, not %r"
                                  % type(self._write_concern))
        self._transport = transport if transport is not None else CommandRecorder()
        self._cache = {}
        logger.info("Created %r (read_concern=%r, write_concern=%r)",
                    self, self._read_concern, self._write_concern)

    def __repr__(self):
        return "ConcernClient(nodes=%r)" % (self.nodelist,)

    def __getattr__(self, attr):
        if attr.startswith('_'):
            raise AttributeError(attr)
        if attr in self.UNIMPLEMENTED:
            raise ConcernNotImplementedError.create("ConcernClient", attr)
        return self[attr]

    def __getitem__(self, db_name):
        try:
            return self._cache[db_name]
        except KeyError:
            db = Database(db_name, self)
            self._cache[db_name] = db
            return db

    @property
    def read_concern(self):
        return self._read_concern

    @property
    def write_concern(self):
        return self._write_concern

    @property
    def transport(self):
        return self._transport

    @support_alert
    def get_database(self, name, read_concern=None, write_concern=None):
        """
        Get a database. Unspecified concerns are inherited from the client.

        :param name str:
        :param read_concern ReadConcern|None:
        :param write_concern WriteConcern|None:
        :rtype: database.Database
        """
        return Database(name, self, read_concern=read_concern, write_concern=write_concern)

    @support_alert
    def list_database_names(self):
        """
        :rtype: list[str]
        """
        reply = self['admin'].command({'listDatabases': 1, 'nameOnly': True})
        return [db['name'] for db in reply.get('databases', [])]

    @support_alert
    def drop_database(self, name_or_database, write_concern=None):
        """
        Drop a database.

        :param name_or_database str|database.Database:
        :param write_concern WriteConcern|None:
        :rtype: None
        """
        if isinstance(name_or_database, Database):
            db = name_or_database
        else:
            db = self[name_or_database]
        db.drop(write_concern=write_concern)

    @support_alert
    def close(self):
        """
        Forget every cached database. The transport is left alone.

        :rtype: None
        """
        self._cache.clear()

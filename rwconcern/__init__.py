from . import client
from . import collection
from . import command_cursor
from . import database
from . import errors
from . import read_concern
from . import resolver
from . import results
from . import transport
from . import uri
from . import write_concern

ConcernClient = client.ConcernClient
ReadConcern = read_concern.ReadConcern
ReadConcernLevel = read_concern.ReadConcernLevel
WriteConcern = write_concern.WriteConcern
ConcernResolver = resolver.ConcernResolver
CommandRecorder = transport.CommandRecorder
PyMongoTransport = transport.PyMongoTransport
concerns_from_uri = uri.concerns_from_uri

UNIMPLEMENTED = ['ALL', 'CursorType', 'DeleteMany', 'DeleteOne', 'IndexModel', 'InsertOne',
                 'MongoClient', 'ReadPreference', 'ReplaceOne', 'ReturnDocument',
                 'UpdateMany', 'UpdateOne', 'aggregation', 'auth', 'bulk', 'change_stream',
                 'client_session', 'collation', 'monitoring', 'read_preferences',
                 'server_selectors', 'topology']

VERSION = "0.3.0"


def __getattr__(attr):
    if attr in UNIMPLEMENTED:
        msg = "%s is not implemented. rwconcern only models read and write " \
              "concerns and the commands that carry them." % attr
        raise errors.ConcernNotImplementedError(msg)
    raise AttributeError(attr)

"""
Transports take a finished command document and deliver it. A transport is
any callable `transport(database_name, command) -> dict`.
"""

import copy
import logging
import threading

from bson.son import SON

logger = logging.getLogger(__name__)

_OK_REPLY = {'ok': 1.0}


class CommandStartedEvent():
    def __init__(self, database_name, command):
        self.database_name = database_name
        self.command = command

    def __repr__(self):
        return "CommandStartedEvent(%r, %r)" % (self.database_name, self.command)

    @property
    def command_name(self):
        return next(iter(self.command))


class CommandRecorder():
    """
    Records every command instead of sending it and answers with a canned
    reply. This is the default transport and is what the unit tests use to
    assert exact command shapes.

    :param replies dict[str, dict]: reply per command name. Anything not
                                    listed gets {'ok': 1.0}.
    """

    def __init__(self, replies=None):
        self.replies = dict(replies or {})
        self.started = []
        self.lock = threading.Lock()

    def __repr__(self):
        return "CommandRecorder()"

    def __call__(self, database_name, command):
        event = CommandStartedEvent(database_name, copy.deepcopy(command))
        with self.lock:
            self.started.append(event)
        logger.debug("Recorded %r on %r", event.command_name, database_name)
        return copy.deepcopy(self.replies.get(event.command_name, _OK_REPLY))

    def clear(self):
        with self.lock:
            self.started.clear()

    @property
    def commands(self):
        with self.lock:
            return [event.command for event in self.started]

    def last(self):
        """
        :rtype: SON
        """
        with self.lock:
            if not self.started:
                return None
            return self.started[-1].command


class PyMongoTransport():
    """
    Sends commands through a live pymongo.MongoClient. Concerns have already
    been resolved into the command so pymongo gets them verbatim.

    :param mongo_client pymongo.MongoClient:
    """

    def __init__(self, mongo_client):
        self.mongo_client = mongo_client

    def __repr__(self):
        return "PyMongoTransport(%r)" % (self.mongo_client,)

    def __call__(self, database_name, command):
        logger.debug("Sending %r to %r", next(iter(command)), database_name)
        return self.mongo_client[database_name].command(SON(command))

import logging

from bson.son import SON

from .errors import OperationFailure
from .read_concern import ReadConcern
from .write_concern import WriteConcern

logger = logging.getLogger(__name__)


def build_command(command, caller, read_concern=None, write_concern=None,
                  reads=False, writes=False, inherit=True):
    """
    Build the command document for one operation.

    The operation's own concerns go through the resolvers. If the resolved
    options carry no concern and `inherit` is set, the caller's effective
    concern is written instead, unless it is the server default. Generic
    commands (Database.command) pass inherit=False so that nothing the user
    did not ask for is added.

    :param command Mapping: the bare command, command name first
    :param caller Database|Collection|ConcernClient: the issuing object
    :param read_concern ReadConcern|None:
    :param write_concern WriteConcern|None:
    :param reads bool: the command accepts a read concern
    :param writes bool: the command accepts a write concern
    :param inherit bool:
    :rtype: SON
    """
    opts = None
    if reads:
        opts = ReadConcern.resolve_for_append(read_concern, caller.read_concern, opts)
    if writes:
        opts = WriteConcern.resolve_for_append(write_concern, caller.write_concern, opts)

    cmd = SON(command)
    if opts is not None:
        cmd.update(opts)
    if inherit:
        if reads and ReadConcern.FIELD not in cmd \
           and not caller.read_concern.is_server_default:
            caller.read_concern.append_to(cmd)
        if writes and WriteConcern.FIELD not in cmd \
           and not caller.write_concern.is_server_default:
            caller.write_concern.append_to(cmd)
    return cmd


def effective_write_concern(write_concern, caller):
    """
    :param write_concern WriteConcern|None:
    :param caller Database|Collection:
    :rtype: WriteConcern
    """
    if write_concern is None:
        return caller.write_concern
    return write_concern


def dispatch(transport, database_name, command):
    """
    Hand a finished command to the transport and check the reply.

    :param transport callable:
    :param database_name str:
    :param command SON:
    :rtype: dict
    """
    logger.debug("Dispatching %r to %r", next(iter(command)), database_name)
    reply = transport(database_name, command)
    if reply is None:
        return {}
    if not reply.get('ok', 1):
        raise OperationFailure(reply.get('errmsg', "Command %r failed" % next(iter(command))),
                               code=reply.get('code'), details=reply)
    return reply

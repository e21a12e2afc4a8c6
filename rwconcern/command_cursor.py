from .errors import ConcernNotImplementedError


class CommandCursor():
    UNIMPLEMENTED = ['address', 'alive', 'batch_size', 'close', 'cursor_id', 'session']

    def __init__(self, reply):
        """
        Iterate over the first batch of a cursor reply. getMore is never
        issued.

        :param reply dict: {'cursor': {'firstBatch': [...]}, 'ok': 1}
        """
        self.reply = reply
        self._batch = iter(reply.get('cursor', {}).get('firstBatch', []))

    def __getattr__(self, attr):
        if attr in self.UNIMPLEMENTED:
            raise ConcernNotImplementedError.create("CommandCursor", attr)
        raise AttributeError(attr)

    def __iter__(self):
        return self

    def next(self):
        return next(self._batch)

    __next__ = next

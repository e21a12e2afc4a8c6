from .errors import InvalidOperation


class _WriteResult():
    def __init__(self, acknowledged):
        self.__acknowledged = acknowledged

    def _raise_if_unacknowledged(self, property_name):
        if not self.__acknowledged:
            raise InvalidOperation("A value for %s is not available when "
                                   "the write is unacknowledged. Check the "
                                   "acknowledged attribute to avoid this "
                                   "error." % property_name)

    @property
    def acknowledged(self):
        return self.__acknowledged


class InsertOneResult(_WriteResult):
    def __init__(self, inserted_id, acknowledged=True):
        super().__init__(acknowledged)
        self.inserted_id = inserted_id


class InsertManyResult(_WriteResult):
    def __init__(self, documents, acknowledged=True):
        super().__init__(acknowledged)
        self.inserted_ids = [d['_id'] for d in documents]


class UpdateResult(_WriteResult):
    def __init__(self, reply, acknowledged=True):
        super().__init__(acknowledged)
        self.raw_result = reply

    @property
    def matched_count(self):
        self._raise_if_unacknowledged('matched_count')
        if self.upserted_id is not None:
            return 0
        return self.raw_result.get('n', 0)

    @property
    def modified_count(self):
        self._raise_if_unacknowledged('modified_count')
        return self.raw_result.get('nModified', 0)

    @property
    def upserted_id(self):
        self._raise_if_unacknowledged('upserted_id')
        upserted = self.raw_result.get('upserted')
        if upserted:
            return upserted[0]['_id']
        return None


class DeleteResult(_WriteResult):
    def __init__(self, reply, acknowledged=True):
        super().__init__(acknowledged)
        self.raw_result = reply

    @property
    def deleted_count(self):
        self._raise_if_unacknowledged('deleted_count')
        return self.raw_result.get('n', 0)

class ConcernError(Exception):
    pass


class ConcernNotImplementedError(ConcernError, NotImplementedError):
    @staticmethod
    def create(cls, attr):
        msg = "%s.%s is not implemented. rwconcern only covers the read/write " \
              "concern surface of PyMongo." % (cls, attr)
        return ConcernNotImplementedError(msg)

    @staticmethod
    def create_depr(cls, attr):
        msg = "%s.%s is deprecated and will not be implemented in rwconcern." % (cls, attr)
        return ConcernNotImplementedError(msg)


class ValidationError(ConcernError):
    """
    A concern (or a connection string carrying one) was rejected at
    construction time.
    """


class SerializationError(ConcernError):
    """
    Appending a concern to a document failed at the storage layer.
    """


class InvalidName(ConcernError):
    pass


class InvalidOperation(ConcernError):
    pass


class OperationFailure(ConcernError):
    def __init__(self, message, code=None, details=None):
        super().__init__(message)
        self.code = code
        self.details = details


# For pymongo compatibility - especially in unit tests
PyMongoError = ConcernError

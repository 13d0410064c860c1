# datasources/exceptions.py

class DataSourceError(Exception):
    pass


class DataSourceUnavailable(DataSourceError):
    pass


class QueryTimeout(DataSourceError):
    pass


class InvalidDocument(DataSourceError):
    pass

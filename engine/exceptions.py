# engine/exceptions.py

class DetectionError(Exception):
    pass


class ConfigurationError(DetectionError):
    pass


class MalformedSampleError(DetectionError):
    pass


class InsufficientDataError(DetectionError):
    pass


class EmptyPartitionError(DetectionError):
    pass


class SeriesStateError(DetectionError):
    pass

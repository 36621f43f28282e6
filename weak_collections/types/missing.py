# Sentinels for absent slots and unset arguments


class _MissingType(type):
    """
    This metaclass is used to create singleton falsey classes for use as missing
    and/or sentinel placeholder values.
    """

    def __repr__(cls):
        return cls.__name__

    def __bool__(cls):
        return False

    def __call__(cls):
        return cls


class MISSING(metaclass=_MissingType):
    """
    Used to represent slots in weak storage that hold no value, and arguments
    that were not passed at all. Unlike `None`, it is not a meaningful value for
    callers to store, so a stored `None` is always distinguishable from an
    absent one.
    """


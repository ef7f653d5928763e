class OMITTED:
    """used as singleton for field values that were never set"""

    def __repr__(self) -> str:
        return "omitted"

    def __str__(self) -> str:
        return "omitted"

    def __reduce__(self) -> str:
        return "omitted"


omitted = OMITTED()


class EMPTY:
    """used as singleton for omitted options/kwargs"""

    def __repr__(self) -> str:
        return "empty"

    def __str__(self) -> str:
        return "empty"

    def __reduce__(self) -> str:
        return "empty"


empty = EMPTY()


class ZERO:
    """Returned by marshal hooks, next to their output, to report that the
    output is the type's zero state.

    Only ever compared by identity. A record field with `omit_empty` set is
    dropped when its hook returns this; everywhere else it means success.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "zero"

    def __str__(self) -> str:
        return "zero"

    def __reduce__(self) -> str:
        # copy/pickle resolve back to the module-level instance
        return "zero"


zero = ZERO()

"""Helpers for anyio task groups."""


def first_error(group: BaseExceptionGroup[BaseException]) -> BaseException:
    """Return the first leaf exception of a possibly nested exception group.

    anyio task groups always wrap task failures in an exception group. Callers
    that run independent tasks of the same kind want to surface a single
    failure of the original type, so they re-raise the first leaf.

    Args:
        group: The exception group raised by a task group.

    Returns:
        The first exception that is not itself a group.
    """
    error: BaseException = group
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


def leaf_errors(group: BaseExceptionGroup[BaseException]) -> list[BaseException]:
    """Flatten an exception group into its leaf exceptions, in order."""
    leaves: list[BaseException] = []
    for error in group.exceptions:
        if isinstance(error, BaseExceptionGroup):
            leaves.extend(leaf_errors(error))
        else:
            leaves.append(error)
    return leaves

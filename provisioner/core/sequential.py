from typing import Any, Awaitable, Callable, Iterable, List, TypeVar

T = TypeVar("T")


async def sequential_for_each(items: Iterable[T], func: Callable[[T], Awaitable[Any]]) -> List[Any]:
    """
    Await func(item) for each item in order, one at a time.

    Stops at the first failure: the exception propagates and later items are never
    started.

    Returns:
        list: The result of each call, in order
    """
    results = []
    for item in items:
        results.append(await func(item))
    return results

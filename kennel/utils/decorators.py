# kennel/utils/decorators.py
from functools import wraps


def transactional(service_func):
    """
    Run a service function inside ``repo.transaction()``.

    The wrapped function must take the repository as its first argument.
    Calls from inside another transactional function join the outer
    transaction, so only the outermost call commits.
    """
    @wraps(service_func)
    def wrapper(repo, *args, **kwargs):
        with repo.transaction():
            return service_func(repo, *args, **kwargs)
    return wrapper

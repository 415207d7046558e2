# hydroscan/utils/retry.py
from sqlalchemy.exc import OperationalError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential


def is_transient_db_error(e: BaseException) -> bool:
    # transaction() wraps driver errors, so look at the cause as well
    return isinstance(e, OperationalError) or isinstance(e.__cause__, OperationalError)


#sqlite reports "database is locked" while another connection holds the write lock
def db_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception(is_transient_db_error),
    )

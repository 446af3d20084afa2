# Retry handling shared by the Trac client calls
import time
import logging
import requests
import functools


class FetchError(Exception):
    """Raised by a decorated client call that failed for good."""

    def __init__(self, url, reason):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


def _find_url(args, kwargs):
    """The 'url' kwarg, else the first positional string that looks like a URL."""
    if kwargs.get('url'):
        return kwargs['url']
    return next((arg for arg in args if isinstance(arg, str) and arg.startswith('http')), None)


def _status_code(error):
    response = getattr(error, 'response', None)
    return response.status_code if response is not None else None


def _is_retryable_status(status_code):
    return status_code is not None and (status_code == 429 or status_code >= 500)


def retry_request(max_retries_key="max_retries", delay_key="retry_delay_seconds", non_retryable_status=(404,),
                  return_on_failure=None, raise_on_failure=False):
    """
    Decorator retrying a function that performs one `requests` call.

    The wrapped function must take its settings as a `config=` keyword
    argument; `max_retries_key` and `delay_key` name the entries holding the
    retry count and the base backoff delay. Attempt n waits
    `delay * 2 ** (n - 1)` seconds.

    Throttling (429), server errors (5xx), timeouts and connection errors are
    retried. Statuses in `non_retryable_status`, other HTTP errors, other
    request exceptions and local I/O errors fail at once.

    On final failure the decorator returns `return_on_failure`, or raises
    FetchError(url, reason) when `raise_on_failure` is set.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            url = _find_url(args, kwargs)
            target = f"for {url[:80]}..." if url else f"for function {func.__name__}"

            def fail(reason):
                if raise_on_failure:
                    raise FetchError(url or func.__name__, reason)
                return return_on_failure

            config = kwargs.get('config')
            if not isinstance(config, dict) or not config:
                logging.error(f"@retry_request needs a 'config' dict keyword argument on {func.__name__}. Retries disabled.")
                try:
                    return func(*args, **kwargs)
                except requests.exceptions.RequestException as e:
                    logging.error(f"Request failed {target} (no retries applied): {e}")
                    return fail(str(e))

            max_retries = config.get(max_retries_key, 3)
            delay = config.get(delay_key, 1)

            for attempt in range(max_retries + 1):
                if attempt:
                    wait_time = delay * 2 ** (attempt - 1)
                    logging.warning(f"Retrying request {target} ({attempt}/{max_retries}) after {wait_time:.2f} seconds...")
                    time.sleep(wait_time)
                try:
                    return func(*args, **kwargs)
                except requests.exceptions.HTTPError as e:
                    last_error = e
                    status_code = _status_code(e)
                    if status_code in non_retryable_status:
                        logging.warning(f"HTTP error {status_code} {target} is non-retryable. Failing.")
                        return fail(f"HTTP {status_code}")
                    if not _is_retryable_status(status_code):
                        logging.error(f"HTTP error ({status_code or 'no status code'}) {target}: {e}")
                        return fail(f"HTTP {status_code}" if status_code else str(e))
                    logging.warning(f"Retryable HTTP error {status_code} {target}.")
                except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                    last_error = e
                    logging.warning(f"{type(e).__name__} occurred {target}.")
                except requests.exceptions.RequestException as e:
                    logging.error(f"Unhandled RequestException {target}: {e}")
                    return fail(str(e))
                except OSError as e:
                    # requests exceptions are OSErrors too, so this only sees local write failures
                    logging.error(f"I/O error in {func.__name__} {target}: {e}")
                    return fail(f"I/O error: {e}")

            logging.error(f"Request failed {target} after {max_retries} retries. Last exception: {last_error}")
            return fail(f"failed after {max_retries} retries: {last_error}")

        return wrapper
    return decorator

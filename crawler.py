# Module orchestrating the export: index, pages, assets, report
import logging
import re
import time
from urllib.parse import unquote

import constants
from asset_fetcher import fetch_page_assets
from file_handler import ensure_page_directory, save_page_html
from models import ErrorLog, WikiPage
from page_sanitizer import SanitizeError, sanitize_page
from skip_filter import build_skip_rules, should_skip
from title_index import discover_pages
from trac_clients.decorators import FetchError
from trac_clients.trac_client import fetch_page

MALFORMED_ESCAPE_RE = re.compile(r'%(?![0-9a-fA-F]{2})')


class FatalCrawlError(Exception):
    """Aborts the whole crawl; main exits with exit_code."""

    def __init__(self, exit_code, message):
        super().__init__(message)
        self.exit_code = exit_code


class RateLimiter:
    """
    Enforces a minimum pause between units of work.

    wait() sleeps for whatever is left of the interval since the last
    wait() or mark(). mark() is called when a unit of work ends, so the
    pause counts from its last request. The first wait() never sleeps.
    """

    def __init__(self, min_interval, clock=time.monotonic, sleep=time.sleep):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last = None

    def wait(self):
        if self._last is not None:
            remaining = self._last + self.min_interval - self._clock()
            if remaining > 0:
                self._sleep(remaining)
        self._last = self._clock()

    def mark(self):
        self._last = self._clock()


def process_page(base_url, page_path, config, error_log, site_origin=None):
    """
    Exports one page: decode its path, create its directory, fetch, sanitize,
    write index.html and fetch its assets.

    Page fetch and sanitizer step failures are recorded and the page
    abandoned. Decode, serialization and write failures raise FatalCrawlError.
    """
    malformed = MALFORMED_ESCAPE_RE.search(page_path)
    if malformed:
        raise FatalCrawlError(constants.EXIT_DECODE_FAILURE,
                              f"Error decoding page path {page_path}: malformed escape at position {malformed.start()}")
    try:
        decoded_path = unquote(page_path, errors='strict')
    except UnicodeDecodeError as e:
        raise FatalCrawlError(constants.EXIT_DECODE_FAILURE, f"Error decoding page path {page_path}: {e}") from e

    page = WikiPage(path=decoded_path)
    page_dir = ensure_page_directory(decoded_path, config['output_dir'])
    if page_dir is None:
        raise FatalCrawlError(constants.EXIT_WRITE_FAILURE, f"Unable to create output directory for {decoded_path}")

    page_url = f"{base_url}{decoded_path}"
    logging.info(f"======= {page_url} =======")
    try:
        page.raw_html = fetch_page(page_url, config=config)
    except FetchError as e:
        error_log.record(decoded_path, e.reason)
        logging.error(f"Error fetching {page_url}: {e.reason}")
        return page

    try:
        sanitized = sanitize_page(page.raw_html, decoded_path, config, site_origin=site_origin)
    except SanitizeError as e:
        error_log.record(decoded_path, f"sanitizer step {e.step_name} failed: {e.cause}")
        logging.error(f"Error sanitizing {page_url}: {e}", exc_info=True)
        return page
    except Exception as e:
        raise FatalCrawlError(constants.EXIT_WRITE_FAILURE, f"Unable to serialize {decoded_path}: {e}") from e
    page.sanitized_html = sanitized.html
    page.assets = sanitized.assets

    if save_page_html(page.sanitized_html, page_dir) is None:
        raise FatalCrawlError(constants.EXIT_WRITE_FAILURE, f"Unable to write {page_dir}/{constants.INDEX_FILENAME}")

    fetch_page_assets(page.assets, base_url, config, error_log)
    return page


def log_summary(error_log):
    logging.info("--- Export Summary ---")
    logging.info(f"Fetch failures: {len(error_log)}")
    for failure in error_log.failures:
        logging.info(f"  {failure.path}: {failure.cause}")


def crawl_wiki(base_url, config, limiter=None, error_log=None):
    """
    Exports every page listed in the wiki's title index, one at a time and
    in index order. Returns the ErrorLog of fetch failures.
    """
    if limiter is None:
        limiter = RateLimiter(config['request_delay_seconds'])
    if error_log is None:
        error_log = ErrorLog()
    skip_rules = build_skip_rules(config.get('skip_patterns'))
    site_origin = config.get('site_origin') or base_url

    limiter.wait()
    page_paths = discover_pages(base_url, config)
    limiter.mark()

    total_pages = len(page_paths)
    exported_count = 0
    skipped_count = 0
    for position, page_path in enumerate(page_paths, 1):
        if should_skip(page_path, skip_rules):
            logging.info(f"Skipping page {position}/{total_pages}: {page_path}")
            skipped_count += 1
            continue

        limiter.wait()
        logging.info(f"Processing page {position}/{total_pages}: {page_path}")
        page = process_page(base_url, page_path, config, error_log, site_origin=site_origin)
        limiter.mark() # the next page waits a full interval after this page's last asset
        if page.sanitized_html is not None:
            exported_count += 1

    logging.info(f"Pages listed: {total_pages}, exported: {exported_count}, skipped: {skipped_count}")
    log_summary(error_log)
    return error_log

# Module for fetching wiki pages and assets from a Trac server

import requests
import logging
from .decorators import retry_request # Import the decorator
from file_handler import save_stream


def _check_status(response, url, kind):
    """Raises HTTPError for anything but 200 so the decorator can classify it."""
    if response.status_code == 200:
        return
    if response.status_code == 429 or response.status_code >= 500:
        logging.warning(f"Trac {kind} request failed with status {response.status_code}. Decorator will handle retry.")
    else:
        logging.warning(f"Trac {kind} request for {url} returned status {response.status_code}.")
    response.raise_for_status()
    # Non-error statuses other than 200 (204, unfollowed 3xx) carry no usable body
    raise requests.exceptions.HTTPError(f"Unexpected status {response.status_code} for {url}", response=response)


# --- Page Fetching ---
@retry_request(non_retryable_status=(404,), raise_on_failure=True)
def fetch_page(page_url, config, timeout_key='request_timeout_content'):
    """
    Fetches the HTML of a wiki page, buffered.
    Returns the page text; raises FetchError on failure.
    """
    headers = {'User-Agent': config['user_agent']}
    logging.debug(f"Attempting to fetch page: {page_url}")

    response = requests.get(page_url, headers=headers, timeout=config[timeout_key])
    try:
        _check_status(response, page_url, "page")
        response.encoding = 'utf-8' # Trac always serves UTF-8
        logging.debug(f"Successfully fetched page: {page_url}")
        return response.text
    finally:
        # Ensure the response is always closed
        response.close()


# --- Asset Fetching ---
@retry_request(non_retryable_status=(404,), raise_on_failure=True)
def download_asset(asset_url, asset_path, config):
    """
    Streams an asset straight to asset_path.
    Returns the number of bytes written; raises FetchError on failure.
    """
    headers = {'User-Agent': config['user_agent']}
    logging.debug(f"Attempting to fetch asset: {asset_url}")

    response = requests.get(asset_url, headers=headers, timeout=config['request_timeout_content'], stream=True)
    try:
        _check_status(response, asset_url, "asset")
        return save_stream(response.iter_content(chunk_size=config['download_chunk_size']), asset_path)
    finally:
        response.close()

# Module downloading the assets a sanitized page refers to
import logging

from file_handler import asset_exists
from path_resolver import fetch_path, storage_path
from trac_clients.decorators import FetchError
from trac_clients.trac_client import download_asset

logger = logging.getLogger(__name__)


def fetch_page_assets(asset_refs, base_url, config, error_log):
    """
    Downloads each asset reference not yet on disk, in order.

    On the first failed download the failure is recorded in error_log and
    the page's remaining assets are left for a later run. Returns True when
    every asset is present afterwards.
    """
    fetched_count = 0
    skipped_count = 0
    for position, asset_ref in enumerate(asset_refs, 1):
        local_path = storage_path(
            asset_ref,
            config['output_dir'],
            logo_chrome_path=config['logo_chrome_path'],
            static_logo_path=config['static_logo_path'],
        )
        if asset_exists(local_path):
            logger.debug(f"Asset already present, skipping: {local_path}")
            skipped_count += 1
            continue

        asset_url = f"{base_url}{fetch_path(asset_ref)}"
        logger.info(f"Fetching asset {position}/{len(asset_refs)}: {asset_url}")
        try:
            download_asset(asset_url, local_path, config=config)
        except FetchError as e:
            error_log.record(asset_ref, e.reason)
            remaining = len(asset_refs) - position
            logger.error(f"Failed to fetch asset {asset_url}: {e.reason}. Abandoning {remaining} remaining assets for this page.")
            return False
        fetched_count += 1

    logger.info(f"Asset summary: Found={len(asset_refs)}, Fetched={fetched_count}, Already present={skipped_count}")
    return True

# Module discovering wiki pages from Trac's TitleIndex page
import logging

from bs4 import BeautifulSoup

from trac_clients.decorators import FetchError
from trac_clients.trac_client import fetch_page

logger = logging.getLogger(__name__)


def parse_title_index(html_content):
    """Returns the href of every listed page in the title index, in document order."""
    soup = BeautifulSoup(html_content, 'html.parser')
    return [a['href'] for a in soup.select('.titleindex li > a[href]')]


def discover_pages(base_url, config):
    """
    Fetches and parses the title index. Fails softly: any error is logged and
    an empty list is returned so the crawl can finish with zero pages.
    """
    index_url = f"{base_url}{config['title_index_path']}"
    logger.info(f"Fetching title index: {index_url}")
    try:
        html_content = fetch_page(index_url, config=config, timeout_key='request_timeout_index')
    except FetchError as e:
        logger.error(f"Error fetching title index {index_url}: {e.reason}")
        return []

    try:
        pages = parse_title_index(html_content)
    except Exception as e:
        logger.error(f"Error parsing title index {index_url}: {e}", exc_info=True)
        return []

    for page_path in pages:
        logger.info(page_path)
    logger.info(f"Found {len(pages)} pages in the title index.")
    return pages

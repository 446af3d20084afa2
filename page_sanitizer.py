# Module turning fetched Trac wiki pages into static HTML
#
# The page is parsed once and run through SANITIZE_STEPS in order. Each step
# is a plain function of (soup, context); later steps rely on earlier ones,
# e.g. asset collection sees origin-relative URLs but not the image aliases.

import logging
import posixpath
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Comment, Doctype
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

import constants
from models import SanitizedPage

logger = logging.getLogger(__name__)

# Minimal escaping and no XHTML slash on void elements
HTML5_FORMATTER = HTMLFormatter(entity_substitution=EntitySubstitution.substitute_xml,
                                void_element_close_prefix=None)

ASSET_SELECTOR = ', '.join([
    'link[rel="stylesheet"][href]',
    f'a[href^="{constants.ATTACHMENT_PREFIX}"]',
    f'a[href^="{constants.RAW_ATTACHMENT_PREFIX}"]',
    'img[src]',
    'script[src]',
])
ABSOLUTE_URL_RE = re.compile(r'^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//)')

# Genshi leaves these behind when a page has no modification date
DATE_PLACEHOLDER_RE = re.compile(
    r'^\s*(?:<function\s+[\w.<>]+\s+at\s+0x[0-9a-fA-F]+>|\$\{?\s*[\w.]*dateinfo\(.*\)\s*\}?)\s*$',
    re.DOTALL,
)
TITLE_PREFIX_RE = re.compile(r'^\D*') # "See timeline at "
TIMELINE_DATE_RE = re.compile(r'[\d-]+')
ANONYMOUS_ATTRIBUTION_RE = re.compile(
    r'\s*(?:-|–|&ndash;)?\s*added by\s*(?:<[^>]+>\s*)*(?:&lt;)?anonymous(?:&gt;)?.*$',
    re.DOTALL,
)


class SanitizeError(Exception):
    """A sanitizer step failed on one page."""

    def __init__(self, page_path, step_name, cause):
        super().__init__(f"step {step_name} failed on {page_path}: {cause}")
        self.page_path = page_path
        self.step_name = step_name
        self.cause = cause


@dataclass
class SanitizeContext:
    """Per-page settings read by the steps, plus the assets they collect."""

    page_path: str
    origin_pattern: Optional[Pattern] = None
    rewrite_wiki_links: bool = False
    wiki_prefix: str = constants.WIKI_PREFIX
    logo_chrome_path: str = constants.LOGO_CHROME_PATH
    static_logo_path: str = constants.STATIC_LOGO_PATH
    footer_html: str = constants.FOOTER_HTML
    assets: List[str] = field(default_factory=list)


def origin_pattern(site_origin):
    """Matches the wiki's own origin at the start of a URL, over http or https."""
    if not site_origin:
        return None
    netloc = urlsplit(site_origin).netloc or site_origin.strip('/')
    return re.compile(r'^https?://' + re.escape(netloc) + r'(?=[/?#]|$)', re.IGNORECASE)


def _title_timestamp(tag):
    title = tag.get('title') or ''
    return TITLE_PREFIX_RE.sub('', title).strip()


def _replace_with_fragment(tag, markup):
    """Replaces tag by the nodes parsed from markup."""
    for node in list(BeautifulSoup(markup, 'html.parser').contents):
        tag.insert_before(node)
    tag.extract()


# --- Steps ---
def normalize_root(soup, context):
    """Serve the XHTML page as HTML5."""
    html_tag = soup.find('html')
    if html_tag is not None:
        namespace_attrs = [name for name in html_tag.attrs if name == 'xmlns' or name.startswith('xmlns:')]
        for name in namespace_attrs:
            del html_tag[name]
        if namespace_attrs:
            html_tag['lang'] = 'en'
    for item in list(soup.contents):
        if isinstance(item, Doctype) and item.strip().lower() != 'html':
            item.replace_with(Doctype('html'))


def strip_chrome(soup, context):
    for element in soup.select(', '.join(constants.CHROME_SELECTORS)):
        element.extract()
    for paragraph in soup.select(f'p:-soup-contains("{constants.ACL_MARKER}")'):
        paragraph.extract()


def strip_head_comments(soup, context):
    if soup.head is None:
        return
    for comment in soup.head.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()


def ensure_charset(soup, context):
    head = soup.head
    if head is None:
        return
    for meta in head.select('meta[charset]'):
        meta.extract()
    head.insert(0, soup.new_tag('meta', charset='utf-8'))


def strip_icon_type(soup, context):
    for link in soup.select('link[rel="icon"]'):
        if link.has_attr('type'):
            del link['type']


def strip_download_all(soup, context):
    for paragraph in soup.select(f'#attachments p:-soup-contains("{constants.DOWNLOAD_ALL_TEXT}")'):
        paragraph.extract()


def relativize_origin(soup, context):
    if context.origin_pattern is None:
        return
    for attr, selector in (('src', 'script[src^="http"]'), ('href', 'link[href^="http"]')):
        for tag in soup.select(selector):
            tag[attr] = context.origin_pattern.sub('', tag[attr]) or '/'


def append_folding_script(soup, context):
    if soup.head is None:
        return
    script = soup.new_tag('script')
    script.string = constants.FOLDABLE_SCRIPT
    soup.head.append(script)


def resolve_date_placeholders(soup, context):
    for placeholder in soup.find_all(string=DATE_PLACEHOLDER_RE):
        if isinstance(placeholder, Comment):
            continue
        element = placeholder.parent
        timestamp = _title_timestamp(element)
        if timestamp:
            element.replace_with(timestamp)
        else:
            logger.warning(f"Date placeholder without timestamp on {context.page_path}; dropping it.")
            placeholder.replace_with('')


def _asset_reference(value):
    """Returns the root-relative path an attribute points at, or None if it is not a local file."""
    ref = value.split('#', 1)[0].strip()
    if not ref or ABSOLUTE_URL_RE.match(ref) or not ref.startswith('/') or ref.endswith('/'):
        return None
    return ref


def _add_asset(context, ref):
    if ref not in context.assets:
        context.assets.append(ref)


def collect_assets(soup, context):
    for tag in soup.select(ASSET_SELECTOR):
        attr = 'src' if tag.name in ('img', 'script') else 'href'
        ref = _asset_reference(tag.get(attr) or '')
        if ref is None:
            logger.debug(f"Not collecting {tag.name} {attr}={tag.get(attr)!r} on {context.page_path}")
            continue
        _add_asset(context, ref)
        if tag.name == 'link' and posixpath.basename(ref) == constants.CODE_STYLESHEET_SOURCE:
            _add_asset(context, posixpath.join(posixpath.dirname(ref), constants.CODE_STYLESHEET))


def alias_images(soup, context):
    for img in soup.select('img[src]'):
        src = img['src']
        if src == context.logo_chrome_path:
            img['src'] = context.static_logo_path
        elif src.startswith(constants.RAW_ATTACHMENT_PREFIX):
            img['src'] = constants.ATTACHMENT_PREFIX + src[len(constants.RAW_ATTACHMENT_PREFIX):]


def strip_anonymous_attribution(soup, context):
    for item in soup.select('#attachments li'):
        markup = item.decode_contents()
        stripped = ANONYMOUS_ATTRIBUTION_RE.sub('', markup)
        if stripped == markup:
            continue
        item.clear()
        for node in list(BeautifulSoup(stripped, 'html.parser').contents):
            item.append(node)


def flatten_timeline_links(soup, context):
    for anchor in soup.select(f'a.timeline, a[href^="{constants.TIMELINE_PREFIX}"]'):
        match = TIMELINE_DATE_RE.match(_title_timestamp(anchor))
        if match:
            anchor.replace_with(match.group(0))


def replace_header_footer(soup, context):
    header_div = soup.find(id='header')
    if header_div is not None:
        header = soup.new_tag('header')
        for child in list(header_div.contents):
            header.append(child)
        header_div.replace_with(header)

    footer_div = soup.find(id='footer')
    if footer_div is not None:
        _replace_with_fragment(footer_div, context.footer_html)


def rewrite_wiki_links(soup, context):
    if not context.rewrite_wiki_links:
        return
    prefix = context.wiki_prefix
    for anchor in soup.select('a[href]'):
        href = anchor['href']
        if href == prefix or href.startswith((prefix + '/', prefix + '?', prefix + '#')):
            rest = href[len(prefix):]
            anchor['href'] = rest if rest.startswith('/') else '/' + rest


SANITIZE_STEPS = (
    ('normalize_root', normalize_root),
    ('strip_chrome', strip_chrome),
    ('strip_head_comments', strip_head_comments),
    ('ensure_charset', ensure_charset),
    ('strip_icon_type', strip_icon_type),
    ('strip_download_all', strip_download_all),
    ('relativize_origin', relativize_origin),
    ('append_folding_script', append_folding_script),
    ('resolve_date_placeholders', resolve_date_placeholders),
    ('collect_assets', collect_assets),
    ('alias_images', alias_images),
    ('strip_anonymous_attribution', strip_anonymous_attribution),
    ('flatten_timeline_links', flatten_timeline_links),
    ('replace_header_footer', replace_header_footer),
    ('rewrite_wiki_links', rewrite_wiki_links),
)


def build_context(page_path, config, site_origin=None):
    return SanitizeContext(
        page_path=page_path,
        origin_pattern=origin_pattern(site_origin or config.get('site_origin')),
        rewrite_wiki_links=config.get('rewrite_wiki_links', False),
        wiki_prefix=config.get('wiki_prefix', constants.WIKI_PREFIX),
        logo_chrome_path=config.get('logo_chrome_path', constants.LOGO_CHROME_PATH),
        static_logo_path=config.get('static_logo_path', constants.STATIC_LOGO_PATH),
        footer_html=config.get('footer_html', constants.FOOTER_HTML),
    )


def sanitize_page(html_content, page_path, config, site_origin=None):
    """
    Strips Trac chrome from a fetched page and rewrites it for static hosting.

    Returns a SanitizedPage with the HTML5 markup and the ordered,
    de-duplicated asset references the page still needs. A failing step
    raises SanitizeError; serialization errors propagate unchanged.
    """
    context = build_context(page_path, config, site_origin)
    soup = BeautifulSoup(html_content, 'html.parser')
    for name, step in SANITIZE_STEPS:
        logger.debug(f"Applying {name} to {page_path}")
        try:
            step(soup, context)
        except Exception as e:
            raise SanitizeError(page_path, name, e) from e
    html = soup.decode(formatter=HTML5_FORMATTER)
    logger.debug(f"Sanitized {page_path}: {len(context.assets)} asset references")
    return SanitizedPage(html=html, assets=list(context.assets))

# constants.py - Define constants used throughout the application

# --- Trac URL Layout ---
WIKI_PREFIX = "/wiki"
TITLE_INDEX_PATH = "/wiki/TitleIndex"
ATTACHMENT_PREFIX = "/attachment/"
RAW_ATTACHMENT_PREFIX = "/raw-attachment/"
TIMELINE_PREFIX = "/timeline"
LOGO_CHROME_PATH = "/chrome/site/your_project_logo.png" # Trac's default header_logo
STATIC_LOGO_PATH = "/site/logo.png"

# --- File/Directory Names ---
DEFAULT_OUTPUT_DIR = "./public"
DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_LOG_FILE = "export_tracwiki.log"
INDEX_FILENAME = "index.html"
PARTIAL_SUFFIX = ".part" # Assets stream here before being moved into place

# --- Request Defaults ---
DEFAULT_USER_AGENT = "export-tracwiki/1.0"
DEFAULT_REQUEST_DELAY = 1.0 # Minimum seconds between page fetches
DEFAULT_RETRY_DELAY = 1.0 # Base for exponential retry backoff
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT_INDEX = 30
DEFAULT_TIMEOUT_CONTENT = 60
DEFAULT_CHUNK_SIZE = 8192

# --- Exit Codes ---
EXIT_USAGE = 1
EXIT_WRITE_FAILURE = 1
EXIT_DECODE_FAILURE = 2

# --- Skip Rules ---
# Regexes matched at the start of a page path. A dict entry exempts exact paths.
DEFAULT_SKIP_PATTERNS = [
    r"/wiki/Trac",
    r"/wiki/(?:CamelCase|InterMapTxt|InterTrac|InterWiki|PageTemplates|RecentChanges|SandBox|TitleIndex)(?:/|$)",
    {"pattern": r"/wiki/Wiki", "allow": ["/wiki/WikiStart"]},
    r"/(?:admin|prefs|login|logout|register)(?:/|$)",
    r"/wiki/BadContent$",
]

# --- Page Chrome ---
CHROME_SELECTORS = [
    '#metanav', '#mainnav', '#ctxtnav', '#search',
    '#altlinks', '.trac-modifiedby', '#trac-noscript',
    'link[rel="search"]', 'link[rel="help"]', 'link[rel="alternate"]',
    'link[rel="start"]', 'link[rel="shortcut icon"]',
    'meta[http-equiv]', 'meta[name="robots" i]',
    'script:not([src])',
    'script[src$="/site/js/babel.js"]', 'script[src$="/site/js/search.js"]',
    'span[class="icon"]', 'a[class="trac-rawlink"]',
]
ACL_MARKER = "#acl "
DOWNLOAD_ALL_TEXT = "Download all attachments"
CODE_STYLESHEET_SOURCE = "wiki.css"
CODE_STYLESHEET = "code.css" # Never linked by Trac pages but always needed

FOLDABLE_SCRIPT = """jQuery(document).ready(function($) {
     $('.foldable').enableFolding(true, true); });
  """

FOOTER_HTML = """<footer id="footer">
  <hr>
  <p class="license">Except where otherwise noted, content on this wiki is licensed under a
    <a rel="license" href="https://creativecommons.org/licenses/by-sa/4.0/">Creative Commons Attribution-ShareAlike 4.0 International License</a>.</p>
  <nav><a href="/">Home</a> | <a href="/wiki/TitleIndex">Index</a></nav>
</footer>"""

# Module for loading and validating configuration
import json
import re
import constants # Import constants


def _default_config():
    return {
        'output_dir': constants.DEFAULT_OUTPUT_DIR,
        'log_file': constants.DEFAULT_LOG_FILE,
        'user_agent': constants.DEFAULT_USER_AGENT,
        'request_delay_seconds': constants.DEFAULT_REQUEST_DELAY,
        'retry_delay_seconds': constants.DEFAULT_RETRY_DELAY,
        'max_retries': constants.DEFAULT_MAX_RETRIES,
        'request_timeout_index': constants.DEFAULT_TIMEOUT_INDEX,
        'request_timeout_content': constants.DEFAULT_TIMEOUT_CONTENT,
        'download_chunk_size': constants.DEFAULT_CHUNK_SIZE,
        'rewrite_wiki_links': False,
        'wiki_prefix': constants.WIKI_PREFIX,
        'title_index_path': constants.TITLE_INDEX_PATH,
        'site_origin': None, # Falls back to the base URL given on the command line
        'logo_chrome_path': constants.LOGO_CHROME_PATH,
        'static_logo_path': constants.STATIC_LOGO_PATH,
        'footer_html': constants.FOOTER_HTML,
        'skip_patterns': list(constants.DEFAULT_SKIP_PATTERNS),
    }


def _validate_skip_patterns(entries):
    if not isinstance(entries, list):
        raise ValueError("Config 'skip_patterns' must be a list.")
    for entry in entries:
        if isinstance(entry, dict):
            pattern = entry.get('pattern')
            if not isinstance(entry.get('allow', []), list):
                raise ValueError(f"Config 'skip_patterns' entry {entry!r} has a non-list 'allow'.")
        else:
            pattern = entry
        if not isinstance(pattern, str):
            raise ValueError(f"Config 'skip_patterns' entry {entry!r} has no pattern string.")
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValueError(f"Config 'skip_patterns' entry {pattern!r} is not a valid regex: {e}") from e


def load_config(config_path=None):
    """
    Loads configuration from an optional JSON file, applies defaults and validates.

    With no path only the defaults are returned. A missing file raises
    FileNotFoundError; invalid content raises ValueError.
    """
    config = _default_config()
    if config_path is None:
        return config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            overrides = json.load(f)

        if not isinstance(overrides, dict):
            raise ValueError(f"Config file '{config_path}' must contain a JSON object.")

        unknown_keys = [key for key in overrides if key not in config]
        if unknown_keys:
            raise ValueError(f"Config file '{config_path}' has unknown keys: {', '.join(sorted(unknown_keys))}")

        config.update(overrides)

        # --- Validation ---
        for key in ('request_delay_seconds', 'retry_delay_seconds', 'request_timeout_index', 'request_timeout_content'):
            if isinstance(config[key], bool) or not isinstance(config[key], (int, float)) or config[key] < 0:
                raise ValueError(f"Config '{key}' must be a non-negative number.")
        if isinstance(config['max_retries'], bool) or not isinstance(config['max_retries'], int) or config['max_retries'] < 0:
            raise ValueError("Config 'max_retries' must be a non-negative integer.")
        if isinstance(config['download_chunk_size'], bool) or not isinstance(config['download_chunk_size'], int) or config['download_chunk_size'] <= 0:
            raise ValueError("Config 'download_chunk_size' must be a positive integer.")
        if not isinstance(config['rewrite_wiki_links'], bool):
            raise ValueError("Config 'rewrite_wiki_links' must be true or false.")
        for key in ('output_dir', 'wiki_prefix', 'title_index_path', 'logo_chrome_path', 'static_logo_path'):
            if not isinstance(config[key], str) or not config[key]:
                raise ValueError(f"Config '{key}' must be a non-empty string.")
        for key in ('wiki_prefix', 'title_index_path', 'logo_chrome_path', 'static_logo_path'):
            if not config[key].startswith('/'):
                raise ValueError(f"Config '{key}' must be a root-relative path starting with '/'.")
        if config['site_origin'] is not None and not isinstance(config['site_origin'], str):
            raise ValueError("Config 'site_origin' must be a string or null.")
        _validate_skip_patterns(config['skip_patterns'])

        return config

    except FileNotFoundError:
        raise # Re-raise the FileNotFoundError
    except json.JSONDecodeError as e:
        raise ValueError(f"Error decoding JSON from config file '{config_path}': {e}") from e
    except ValueError:
        raise # Let the ValueError raised during validation propagate
    except Exception as e: # Catch any other unexpected errors during loading/validation
        raise RuntimeError(f"An unexpected error occurred loading configuration from '{config_path}': {e}") from e

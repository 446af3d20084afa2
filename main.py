# Main script to export a Trac wiki as a static HTML site
import argparse
import logging
import os
import sys

import constants
from config_loader import load_config
from crawler import FatalCrawlError, crawl_wiki
from logger_setup import setup_logging


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(constants.EXIT_USAGE, f"{self.prog}: error: {message}\n")


def parse_args(argv=None):
    parser = _ArgumentParser(
        prog="export-tracwiki",
        description="Export a Trac wiki as static HTML into " + constants.DEFAULT_OUTPUT_DIR,
    )
    parser.add_argument("wiki_url", metavar="WIKIURL", help="Base URL of the Trac site, e.g. https://trac.example.org")
    parser.add_argument(
        "--wiki",
        action="store_true",
        help="Rewrite /wiki/... links to /... so pages are served from the site root",
    )
    return parser.parse_args(argv)


# --- Main Execution ---
def main(argv=None):
    """Main function to orchestrate the export."""
    args = parse_args(argv)

    config_path = constants.DEFAULT_CONFIG_FILE if os.path.exists(constants.DEFAULT_CONFIG_FILE) else None
    try:
        config = load_config(config_path)
    except (ValueError, RuntimeError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        sys.exit(constants.EXIT_USAGE)
    if args.wiki:
        config['rewrite_wiki_links'] = True

    setup_logging(config['log_file'])
    base_url = args.wiki_url.rstrip('/')
    logging.info("--- Starting Trac Wiki Export ---")
    logging.info(f"Exporting {base_url} into {config['output_dir']} (rewrite wiki links: {config['rewrite_wiki_links']})")

    try:
        crawl_wiki(base_url, config)
    except FatalCrawlError as e:
        logging.error(f"{e} Exiting.")
        sys.exit(e.exit_code)

    logging.info("--- Trac Wiki Export Finished ---")


if __name__ == "__main__":
    main()

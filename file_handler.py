# Module for file system operations (page directories, page and asset writes)

import os
import logging
import constants # Import constants


# --- Internal Utilities ---
def _path_segments(page_path):
    """Splits a decoded page path into directory names, dropping empty and dot segments."""
    return [part for part in page_path.strip('/').split('/') if part and part not in ('.', '..')]


def ensure_page_directory(page_path, output_dir):
    """
    Creates the directory mirroring a decoded page path under the output root.
    Returns the directory path or None on error.
    """
    page_dir = os.path.join(output_dir, *_path_segments(page_path))
    try:
        os.makedirs(page_dir, exist_ok=True)
        return page_dir
    except OSError as e:
        logging.error(f"Error creating directory {page_dir} for {page_path}: {e}")
        return None


# --- Page Saving ---
def save_page_html(html_content, page_dir):
    """Writes the sanitized page as index.html in its directory. Returns the file path or None on error."""
    full_path = os.path.join(page_dir, constants.INDEX_FILENAME)
    try:
        with open(full_path, 'w', encoding='utf-8') as f:
            f.write(html_content)
        logging.info(f"Successfully saved: {full_path}")
        return full_path
    except OSError as e:
        logging.error(f"Error writing file {full_path}: {e}")
        return None


# --- Asset Saving ---
def asset_exists(asset_path):
    """An asset already on disk is authoritative and is never fetched again."""
    return os.path.isfile(asset_path)


def save_stream(chunks, asset_path):
    """
    Streams byte chunks into asset_path, creating parent directories as needed.

    The data goes to a sibling partial file that only replaces asset_path once
    the stream is complete, so asset_path never holds an incomplete download.
    The partial file is removed on any error, interrupts included.
    """
    parent_dir = os.path.dirname(asset_path)
    if parent_dir:
        os.makedirs(parent_dir, exist_ok=True)
    part_path = asset_path + constants.PARTIAL_SUFFIX
    written = 0
    try:
        with open(part_path, 'wb') as f:
            for chunk in chunks:
                if chunk: # filter out keep-alive chunks
                    f.write(chunk)
                    written += len(chunk)
        os.replace(part_path, asset_path)
    except BaseException:
        if os.path.exists(part_path):
            os.remove(part_path)
        raise
    logging.info(f"Successfully saved asset: {asset_path} ({written} bytes)")
    return written

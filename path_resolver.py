# Module mapping asset references to local storage paths and remote fetch paths
import constants


def _join_output(output_dir, site_path):
    if not site_path.startswith('/'):
        site_path = '/' + site_path
    return f"{output_dir.rstrip('/')}{site_path}"


def storage_path(asset_ref, output_dir=constants.DEFAULT_OUTPUT_DIR,
                 logo_chrome_path=constants.LOGO_CHROME_PATH,
                 static_logo_path=constants.STATIC_LOGO_PATH):
    """
    Returns where an asset reference is stored under the output root.

    Raw attachments share the regular attachment location and the chrome
    logo lives at the static logo path; every other reference is stored at
    its own path under the output root.
    """
    site_path = asset_ref
    if site_path.startswith(constants.RAW_ATTACHMENT_PREFIX):
        site_path = constants.ATTACHMENT_PREFIX + site_path[len(constants.RAW_ATTACHMENT_PREFIX):]
    elif site_path == logo_chrome_path:
        site_path = static_logo_path
    return _join_output(output_dir, site_path)


def fetch_path(asset_ref):
    """Returns the server path to download an asset reference from."""
    # Attachments are always retrieved unprocessed
    if asset_ref.startswith(constants.ATTACHMENT_PREFIX):
        return constants.RAW_ATTACHMENT_PREFIX + asset_ref[len(constants.ATTACHMENT_PREFIX):]
    return asset_ref

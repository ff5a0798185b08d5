"""Storage key scheme for partial records."""

from urllib.parse import quote

from common.constants import CHUNK_KEY_TEMPLATE, PARTIALS_ROOT


def escape_file_id(file_id: str) -> str:
    """
    Escape a caller-supplied fileId for use as a single key segment.

    Everything outside the unreserved set is percent-encoded, and '.' is
    encoded as well so no fileId can turn into a '.' or '..' path segment.

    Args:
        file_id: Opaque file identifier

    Returns:
        Escaped segment safe for object keys and filesystem paths
    """
    return quote(file_id, safe="").replace(".", "%2E")


def file_prefix(file_id: str) -> str:
    """
    Get the key namespace holding every partial of a file.

    Returns:
        Prefix of the form "partials/<escaped-fileId>/"
    """
    return f"{PARTIALS_ROOT}/{escape_file_id(file_id)}/"


def partial_key(file_id: str, chunk_index: int) -> str:
    """
    Get the storage key of one partial record.

    Returns:
        Key of the form "partials/<escaped-fileId>/chunk_<index>.json"
    """
    return file_prefix(file_id) + CHUNK_KEY_TEMPLATE.format(index=chunk_index)

"""Download files over HTTP."""

import logging
import os
import time
import urllib.parse
import urllib.request
from email.message import Message

from elemental.constants import HTTP_TIMEOUT

_log = logging.getLogger(__name__)
_PROGRESS_INTERVAL = 0.5
_CHUNK_SIZE = 64 * 1024


class Client:
    """An HTTP downloader with a request timeout in seconds."""

    def __init__(self, timeout=HTTP_TIMEOUT):
        self.timeout = timeout

    def get_url(self, url, destination):
        """Download ``url`` to ``destination`` and return the path written.

        If ``destination`` is a directory the file name is taken from the
        response or from the URL.
        """
        try:
            request = urllib.request.Request(url)
        except ValueError:
            _log.error("Failed creating a request to '%s'", url)
            raise

        _log.info("Downloading %s...", url)
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                target = _target_path(destination, response)
                _save(response, target)
        except OSError as err:
            _log.error("Download failed: %s", err)
            raise

        _log.debug("Download saved to %s", target)
        return target


def _target_path(destination, response):
    if not os.path.isdir(destination):
        parent = os.path.dirname(destination)
        if parent:
            os.makedirs(parent, exist_ok=True)
        return destination

    name = None
    disposition = response.headers.get("Content-Disposition")
    if disposition:
        message = Message()
        message["Content-Disposition"] = disposition
        name = message.get_filename()
    if not name:
        path = urllib.parse.urlparse(response.url).path
        name = urllib.parse.unquote(path)
    name = os.path.basename(name or "")
    if not name or name in (".", ".."):
        raise ValueError("no filename could be determined")
    return os.path.join(destination, name)


def _save(response, target):
    total = response.length
    done = 0
    last_report = time.monotonic()
    with open(target, "wb") as out:
        while chunk := response.read(_CHUNK_SIZE):
            out.write(chunk)
            done += len(chunk)
            now = time.monotonic()
            if now - last_report >= _PROGRESS_INTERVAL:
                last_report = now
                if total:
                    _log.debug("  transferred %d / %d bytes (%.2f%%)", done, total, 100 * done / total)
                else:
                    _log.debug("  transferred %d bytes", done)
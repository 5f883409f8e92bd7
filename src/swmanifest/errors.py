"""Error messages and exception types.

Every failure the pipeline reports on its own carries a stable message prefix
taken from `ERRORS`. Filesystem errors raised while reading the source script
or writing the destination are not wrapped; they propagate as `OSError`.
"""

from __future__ import annotations

ERRORS = {
    "invalid-prepend-manifest-arg": (
        "The input to prepend_manifest() must be a dict with at least "
        "'sw_src', 'sw_dest' and 'glob_directory'."
    ),
    "unable-to-make-sw-directory": "Unable to create the directory for the service worker file.",
    "invalid-glob-directory": "The supplied glob_directory must be a path to an existing directory.",
    "unable-to-glob-files": "An error occurred when globbing for files.",
    "invalid-templated-urls": (
        "templated_urls must be a mapping of URLs to either a string or a list of glob patterns."
    ),
    "bad-template-urls-asset": (
        "There was an issue using one of the provided templated_urls: a glob pattern matched no files."
    ),
    "modify-url-prefix-bad-prefixes": "modify_url_prefix must map string prefixes to string replacements.",
    "invalid-dont-cache-bust": "dont_cache_bust_urls_matching must be a compiled regex or a pattern string.",
    "invalid-manifest-entries": "A manifest source must return a list of {url, revision} entries.",
    "bad-manifest-transforms-return-value": (
        "A manifest transform must return a list of {url, revision} entries "
        "or a dict with a 'manifest' list."
    ),
}


class ManifestError(Exception):
    """Base class for failures labeled with an `ERRORS` slug."""

    code = ""

    def __init__(self, detail: str | None = None, *, code: str | None = None):
        if code is not None:
            self.code = code
        msg = ERRORS[self.code]
        if detail:
            msg = f"{msg} {detail}"
        super().__init__(msg)
        self.detail = detail


class InvalidArgumentError(ManifestError):
    code = "invalid-prepend-manifest-arg"


class DirectoryCreationError(ManifestError):
    code = "unable-to-make-sw-directory"


class AcquisitionError(ManifestError):
    """Enumeration failed: bad directory, pattern or templated URL."""

    code = "unable-to-glob-files"


class TransformError(ManifestError):
    code = "bad-manifest-transforms-return-value"

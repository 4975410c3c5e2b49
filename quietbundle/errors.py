"""Error types raised while building the bundle."""

from __future__ import annotations


class BundleError(RuntimeError):
    """Base class for every failure the bundler reports."""


class ConfigError(BundleError):
    """Configuration or local metadata is missing or malformed."""


class RetrievalFailure(BundleError):
    """A remote artifact could not be downloaded."""

    def __init__(self, key: str, url: str, reason: str) -> None:
        super().__init__(f'Failed to fetch "{key}" from "{url}": {reason}')
        self.key = key
        self.url = url


class IncompleteFetch(BundleError):
    """Downloaded contents do not cover every requirement with the right type."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f'Requirement "{key}" is unusable: {reason}')
        self.key = key


class LocateError(BundleError):
    """The body of a function could not be located."""


class AnchorNotFound(LocateError):
    def __init__(self, anchor: str) -> None:
        super().__init__(f'Anchor "{anchor}" not found in code')
        self.anchor = anchor


class UnbalancedBraces(LocateError):
    def __init__(self, anchor: str, detail: str) -> None:
        super().__init__(f'Unbalanced braces after anchor "{anchor}": {detail}')
        self.anchor = anchor


class ParseFailure(BundleError):
    """Fetched or embedded data could not be parsed."""


class PlaceholderNotFound(BundleError):
    """The declaration template has no usable ProfileName placeholder."""


class WriteFailure(BundleError):
    """An output file could not be written."""

    def __init__(self, path: object, reason: str) -> None:
        super().__init__(f'Failed to write "{path}": {reason}')
        self.path = path

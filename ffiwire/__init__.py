"""ffiwire - Sum-type bindings and byte-buffer codecs for FFI boundaries."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ffiwire")
except PackageNotFoundError:
    __version__ = "(local)"

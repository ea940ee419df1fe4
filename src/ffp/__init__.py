"""Top-level package for ffp, the fast directory fingerprinting tool."""

from importlib import metadata as _metadata

from ffp.fingerprint import DirectoryFingerprint, FingerprintResult, fingerprint_directory

__all__ = ["__version__", "DirectoryFingerprint", "FingerprintResult", "fingerprint_directory"]


def __getattr__(name: str):
    if name == "__version__":
        return _metadata.version("ffp")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + ["__version__"])

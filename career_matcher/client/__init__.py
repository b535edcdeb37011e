"""Python client for the Career Matcher API and its three-step purchase workflow."""

from .analytics import FunnelTracker
from .api import ApiClientError, CVAnalysisApi, DownloadedFile
from .persistence import FormPersistence
from .state import CVFile, FormState
from .store import CVAnalysisStore, FileDownloader

__all__ = [
    "ApiClientError",
    "CVAnalysisApi",
    "CVAnalysisStore",
    "CVFile",
    "DownloadedFile",
    "FileDownloader",
    "FormPersistence",
    "FormState",
    "FunnelTracker",
]

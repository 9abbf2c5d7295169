"""Exceptions raised by cutrelease."""


class CutReleaseError(Exception):
    """Base class for all cutrelease errors."""


class HostingError(CutReleaseError):
    """A call to the source-control hosting API failed."""


class CandidateFetchError(CutReleaseError):
    """The merged pull request listing could not be read."""


class SummaryError(CutReleaseError):
    """The language model did not return a usable summary."""


class CredentialError(CutReleaseError):
    """A token could not be resolved or persisted."""

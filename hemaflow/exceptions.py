"""
Exception hierarchy for HemaFlow

All errors raised by the pipeline derive from HemaFlowError so callers in an
interactive session can catch the whole family at once.
"""

from typing import Iterable, List, Optional, Tuple


class HemaFlowError(Exception):
    """Base class for all HemaFlow errors"""


class ParseError(HemaFlowError):
    """Raised when the expression table is missing or malformed"""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class DuplicateKeyError(HemaFlowError):
    """Raised when several records with different values share a (gene, cell line) key"""

    def __init__(self, pairs: Iterable[Tuple[str, str]]):
        self.pairs: List[Tuple[str, str]] = list(pairs)
        preview = ", ".join(f"({g}, {s})" for g, s in self.pairs[:5])
        more = f" and {len(self.pairs) - 5} more" if len(self.pairs) > 5 else ""
        super().__init__(
            f"Conflicting values for {len(self.pairs)} (gene, cell line) pairs: "
            f"{preview}{more}"
        )


class ContrastNotFoundError(HemaFlowError):
    """Raised when a group named in the contrast has no assigned samples"""

    def __init__(self, contrast_name: str, empty_groups: Iterable[str]):
        self.contrast_name = contrast_name
        self.empty_groups = list(empty_groups)
        super().__init__(
            f"Contrast {contrast_name} cannot be tested: no samples assigned to "
            f"{', '.join(self.empty_groups)}"
        )


class AnnotationLoadError(HemaFlowError):
    """Raised when the gene annotation table cannot be read"""


class GeneNotFoundError(HemaFlowError):
    """Raised when a gene token matches neither an identifier nor a display name"""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Gene not found: {token!r}")


class AmbiguousGeneError(HemaFlowError):
    """Raised when a display name maps to more than one gene identifier"""

    def __init__(self, token: str, candidates: Iterable[str]):
        self.token = token
        self.candidates = list(candidates)
        super().__init__(
            f"Gene name {token!r} matches {len(self.candidates)} identifiers: "
            f"{', '.join(self.candidates)}"
        )


class InvalidLabelModeError(HemaFlowError):
    """Raised when an unknown volcano label-selection mode is requested"""

    def __init__(self, mode: str, allowed: Iterable[str]):
        self.mode = mode
        self.allowed = list(allowed)
        super().__init__(
            f"Unknown label mode {mode!r}; expected one of {', '.join(self.allowed)}"
        )

"""Interval version ranges and version normalization."""

import re
from dataclasses import dataclass, field
from typing import Optional

from packaging import version as packaging_version
from packaging.version import Version

from ..errors import RangeParseError

# Release markers appended by some vendors, e.g. 5.3.9.RELEASE, 1.5.0.Final, 33.0.0-jre
VENDOR_SUFFIX_PATTERN = re.compile(r"[.-](?:RELEASE|FINAL|GA|M\d+|jre|android)$", re.IGNORECASE)

SEMVER_PATTERN = re.compile(
    r"^v(?P<core>\d+\.\d+(?:\.\d+)?)"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)

_CORE_PATTERN = re.compile(r"^(?P<core>[0-9.]+)(?P<rest>[-+].*)?$")


def normalize_version(version: str) -> str:
    """Bring a version string into canonical semantic-version form.

    Vendor release suffixes are stripped, a ``v`` prefix is ensured, a bare
    major version is padded to ``major.minor`` and a fourth numeric component
    is moved into build metadata.

    Args:
        version: Version as declared by the ecosystem

    Returns:
        Normalized version string, e.g. ``v1.5.0`` for ``1.5.0.Final``
    """
    text = version.strip()
    text = VENDOR_SUFFIX_PATTERN.sub("", text)
    if text[:1] in ("v", "V"):
        text = text[1:]

    match = _CORE_PATTERN.match(text)
    if not match:
        return f"v{text}"

    parts = match.group("core").split(".")
    rest = match.group("rest") or ""

    if len(parts) == 1:
        parts.append("0")
    if len(parts) == 4:
        build = parts.pop()
        if "+" in rest:
            rest = rest.replace("+", f"+{build}.", 1)
        else:
            rest = f"{rest}+{build}"

    return "v" + ".".join(parts) + rest


def semantic_version(version: str) -> Optional[Version]:
    """Parse a version into a comparable object.

    Build metadata is ignored for ordering, as in semantic versioning.
    Prerelease tags that ``packaging`` does not know order as a dev
    release of the same core version.

    Returns:
        Comparable version or None when the input is not a valid version
    """
    match = SEMVER_PATTERN.match(normalize_version(version))
    if not match:
        return None

    core = match.group("core")
    if core.count(".") == 1:
        core += ".0"
    prerelease = match.group("prerelease")
    if not prerelease:
        return Version(core)

    try:
        return Version(f"{core}-{prerelease}")
    except packaging_version.InvalidVersion:
        return Version(f"{core}.dev0")


@dataclass
class VersionRange:
    """An interval of versions with independently inclusive bounds.

    A missing bound means the range is unbounded on that side.
    """

    lower: Optional[str] = None
    lower_inclusive: bool = False
    upper: Optional[str] = None
    upper_inclusive: bool = False
    _lower_version: Optional[Version] = field(default=None, init=False, repr=False, compare=False)
    _upper_version: Optional[Version] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Resolve bounds to comparable versions."""
        self.lower = self.lower or None
        self.upper = self.upper or None
        self._lower_version = self._resolve_bound(self.lower, "lower")
        self._upper_version = self._resolve_bound(self.upper, "upper")

    def _resolve_bound(self, bound: Optional[str], side: str) -> Optional[Version]:
        if bound is None:
            return None
        resolved = semantic_version(bound)
        if resolved is None:
            raise RangeParseError(str(self), f"cannot parse {side} version {bound}")
        return resolved

    @property
    def is_unbounded(self) -> bool:
        return self.lower is None and self.upper is None

    def matches(self, version: str) -> bool:
        """Check whether a version lies inside this range.

        Args:
            version: Version string in any ecosystem format

        Returns:
            True if the version satisfies both bounds. Versions that cannot
            be normalized never match.
        """
        candidate = semantic_version(version)
        if candidate is None:
            return False
        return self.contains(candidate)

    def contains(self, candidate: Version) -> bool:
        if self._lower_version is not None:
            if self.lower_inclusive and candidate < self._lower_version:
                return False
            if not self.lower_inclusive and candidate <= self._lower_version:
                return False
        if self._upper_version is not None:
            if self.upper_inclusive and candidate > self._upper_version:
                return False
            if not self.upper_inclusive and candidate >= self._upper_version:
                return False
        return True

    def merge(self, other: "VersionRange") -> "VersionRange":
        """Fill bounds this range leaves unset from another range.

        Bounds that are already set are never overwritten.
        """
        lower, lower_inclusive = self.lower, self.lower_inclusive
        upper, upper_inclusive = self.upper, self.upper_inclusive
        if lower is None:
            lower, lower_inclusive = other.lower, other.lower_inclusive
        if upper is None:
            upper, upper_inclusive = other.upper, other.upper_inclusive
        return VersionRange(lower, lower_inclusive, upper, upper_inclusive)

    def __str__(self) -> str:
        return "{}{},{}{}".format(
            "[" if self.lower_inclusive else "(",
            self.lower or "",
            self.upper or "",
            "]" if self.upper_inclusive else ")",
        )


def parse_version_range(expression: str) -> VersionRange:
    """Parse an interval expression such as ``[5.0,)`` or ``(2.0,4.0]``.

    A bracket makes a bound inclusive, a parenthesis exclusive. An empty
    operand leaves that side unbounded. An expression without a comma, such
    as ``1.2`` or ``[1.2]``, is read as the single-point range ``[1.2,1.2]``.

    Args:
        expression: Range expression

    Returns:
        Parsed version range

    Raises:
        RangeParseError: If the expression is malformed
    """
    text = expression.strip()
    if not text:
        raise RangeParseError(expression, "empty version range")

    if "," not in text:
        point = text
        if point[0] in "[(" or point[-1] in ")]":
            if not (point[0] == "[" and point[-1] == "]"):
                raise RangeParseError(expression, "single version must be enclosed in '[' and ']'")
            point = point[1:-1].strip()
        if not point:
            raise RangeParseError(expression, "empty version range")
        return _build_range(expression, point, True, point, True)

    if text.count(",") != 1:
        raise RangeParseError(expression, "version range has more than one comma")

    if text[0] == "[":
        lower_inclusive = True
    elif text[0] == "(":
        lower_inclusive = False
    else:
        raise RangeParseError(expression, "version range does not start with '[' or '('")

    if text[-1] == "]":
        upper_inclusive = True
    elif text[-1] == ")":
        upper_inclusive = False
    else:
        raise RangeParseError(expression, "version range does not end with ']' or ')'")

    lower, upper = text[1:-1].split(",")
    return _build_range(expression, lower.strip(), lower_inclusive, upper.strip(), upper_inclusive)


def _build_range(
    expression: str,
    lower: str,
    lower_inclusive: bool,
    upper: str,
    upper_inclusive: bool,
) -> VersionRange:
    try:
        return VersionRange(lower or None, lower_inclusive, upper or None, upper_inclusive)
    except RangeParseError as e:
        raise RangeParseError(expression, e.reason) from None

"""Per-component collection of check outcomes."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class ComponentReporter:
    """Outcome lists for one named component, e.g. ``SDK``."""

    name: str
    checks: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add_successful_check(self, message: str) -> None:
        self.checks.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "checks": list(self.checks),
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }


class Reporter:
    """Collects outcomes of all components of a run.

    Messages are only ever appended; a component keeps everything reported
    to it even after errors.
    """

    def __init__(self) -> None:
        self._components: Dict[str, ComponentReporter] = {}

    def component(self, name: str) -> ComponentReporter:
        """Return the reporter for a component, creating it on first use."""
        if name not in self._components:
            self._components[name] = ComponentReporter(name)
        return self._components[name]

    @property
    def components(self) -> List[ComponentReporter]:
        return list(self._components.values())

    def results(self) -> Dict[str, Dict[str, List[str]]]:
        return {name: component.to_dict() for name, component in self._components.items()}

    def has_errors(self) -> bool:
        return any(component.errors for component in self._components.values())

    def totals(self) -> Dict[str, int]:
        return {
            "checks": sum(len(c.checks) for c in self._components.values()),
            "warnings": sum(len(c.warnings) for c in self._components.values()),
            "errors": sum(len(c.errors) for c in self._components.values()),
        }

"""Route eligibility filters.

Each filter dimension reads the global setting first; when that is empty the
active group's setting applies; when both are empty the dimension does not
constrain anything.
"""

from collections.abc import Callable, Iterable
from enum import Enum

from api_doc_builder.config import DocConfig
from api_doc_builder.engine import pathmatch
from api_doc_builder.models.route import HandlerMethod

MethodFilter = Callable[[HandlerMethod], bool]


class ConditionType(str, Enum):
    PRODUCES = "produces"
    CONSUMES = "consumes"
    HEADERS = "headers"


class RouteFilter:
    """Decides whether a candidate route belongs in the current document."""

    def __init__(self, config: DocConfig, group_name: str, method_filters: Iterable[MethodFilter] | None = None):
        self.config = config
        self.group_name = group_name
        self.method_filters = list(method_filters) if method_filters is not None else None

    def _setting(self, attribute: str) -> list[str]:
        values = getattr(self.config, attribute)
        if not values:
            group_config = self.config.group_config(self.group_name)
            if group_config is not None:
                values = getattr(group_config, attribute)
        return list(values)

    def is_package_to_scan(self, package: str | None) -> bool:
        if package is None:
            return True
        packages_to_scan = self._setting("packages_to_scan")
        packages_to_exclude = self._setting("packages_to_exclude")
        include = not packages_to_scan or any(_in_package(package, p) for p in packages_to_scan)
        exclude = bool(packages_to_exclude) and any(_in_package(package, p) for p in packages_to_exclude)
        return include and not exclude

    def is_path_to_match(self, operation_path: str) -> bool:
        paths_to_match = self._setting("paths_to_match")
        paths_to_exclude = self._setting("paths_to_exclude")
        include = not paths_to_match or any(pathmatch.match(p, operation_path) for p in paths_to_match)
        exclude = bool(paths_to_exclude) and any(pathmatch.match(p, operation_path) for p in paths_to_exclude)
        return include and not exclude

    def is_condition_to_match(self, existing_conditions: list[str] | None, condition_type: ConditionType) -> bool:
        """Strict comparison: same length and every configured value declared."""
        conditions_to_match = self._setting(f"{condition_type.value}_to_match")
        if not conditions_to_match:
            return True
        existing = list(existing_conditions or [])
        return (
            bool(existing)
            and len(conditions_to_match) == len(existing)
            and all(condition in existing for condition in conditions_to_match)
        )

    def is_method_to_filter(self, handler: HandlerMethod) -> bool:
        if self.method_filters is None:
            return True
        return all(method_filter(handler) for method_filter in self.method_filters)

    def is_filter_condition(
        self,
        operation_path: str,
        produces: list[str] | None,
        consumes: list[str] | None,
        headers: list[str] | None,
        handler: HandlerMethod | None = None,
    ) -> bool:
        if handler is not None and not (
            self.is_method_to_filter(handler) and self.is_package_to_scan(handler.bean.package)
        ):
            return False
        return (
            self.is_path_to_match(operation_path)
            and self.is_condition_to_match(produces, ConditionType.PRODUCES)
            and self.is_condition_to_match(consumes, ConditionType.CONSUMES)
            and self.is_condition_to_match(headers, ConditionType.HEADERS)
        )


def _in_package(package: str, candidate: str) -> bool:
    return package == candidate or package.startswith(candidate + ".")

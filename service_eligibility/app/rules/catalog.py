"""
Catalog administration for the Eligibility Service.

Rule and package edits made from the admin portal. Each edit keeps every
package's grant map aligned with its category's rule list: a new rule is
added to each package as ungranted, a removed rule disappears from each
package in the same call.
"""

import copy
import time
from dataclasses import replace
from typing import Dict, Any, Iterable, List, Optional, Tuple, Union

from shared.logging import get_logger
from shared.errors import NotFoundError, ValidationError
from .models import (
    Delegate, GolfDay, Package, PackageCatalog, PackageCategory, Rule, RuleCatalog,
    normalize_linked_events
)


def _validate_category(category: Union[str, PackageCategory]) -> str:
    try:
        return PackageCategory(category).value
    except ValueError:
        raise ValidationError(
            f"Unknown package category '{category}'",
            {"allowed": [c.value for c in PackageCategory]}
        )


class CatalogManager:
    """Holds the package and rule catalogs and applies admin edits."""

    def __init__(self, packages: Optional[PackageCatalog] = None, rules: Optional[RuleCatalog] = None):
        self.logger = get_logger("eligibility.catalog")
        self.packages: PackageCatalog = dict(packages or {})
        self.rules: RuleCatalog = {category: list(items) for category, items in (rules or {}).items()}

    # Rules

    def get_rules(self, category: str) -> List[Rule]:
        return list(self.rules.get(category) or [])

    def get_rule(self, category: str, rule_id: str) -> Rule:
        for rule in self.rules.get(category) or []:
            if rule.id == rule_id:
                return rule
        raise NotFoundError("Rule", rule_id, {"category": category})

    def _new_rule_id(self, category: str) -> str:
        prefix = category.lower().replace(" ", "")
        stamp = int(time.time() * 1000)
        existing = {rule.id for rule in self.rules.get(category) or []}
        while f"{prefix}_{stamp}" in existing:
            stamp += 1
        return f"{prefix}_{stamp}"

    def add_rule(
        self,
        category: str,
        name: str,
        date: str = "",
        linked_events: Union[str, List[str], None] = None,
        golf_type: Optional[GolfDay] = None,
        rule_id: Optional[str] = None,
    ) -> Rule:
        """Add a rule and seed it as ungranted in every package of the category."""
        category = _validate_category(category)
        if not name or not name.strip():
            raise ValidationError("Rule name is required")

        rules = self.rules.setdefault(category, [])
        if rule_id is None:
            rule_id = self._new_rule_id(category)
        elif any(rule.id == rule_id for rule in rules):
            raise ValidationError(f"Rule '{rule_id}' already exists in {category}")

        rule = Rule(
            id=rule_id,
            name=name.strip(),
            date=date,
            linked_events=normalize_linked_events(linked_events),
            golf_type=GolfDay(golf_type) if golf_type else None,
        )
        rules.append(rule)

        seeded = 0
        for package in self.packages.values():
            if package.category == category:
                package.permissions[rule.id] = False
                seeded += 1

        self.logger.info("Rule added", category=category, rule_id=rule.id, name=rule.name, packages=seeded)
        return rule

    def update_rule(
        self,
        category: str,
        rule_id: str,
        name: Optional[str] = None,
        date: Optional[str] = None,
        linked_events: Union[str, List[str], None] = None,
        golf_type: Optional[GolfDay] = None,
        clear_golf_type: bool = False,
    ) -> Rule:
        """Edit a rule's display fields, links or golf tag. Id and category are fixed.

        ``golf_type=None`` leaves the tag as it is; ``clear_golf_type`` removes it.
        """
        rule = self.get_rule(category, rule_id)
        if name is not None and not name.strip():
            raise ValidationError("Rule name is required")
        if clear_golf_type and golf_type is not None:
            raise ValidationError("Cannot set and clear the golf tag together")

        if name is not None:
            rule.name = name.strip()
        if date is not None:
            rule.date = date
        if linked_events is not None:
            rule.linked_events = normalize_linked_events(linked_events)
        if clear_golf_type:
            rule.golf_type = None
        elif golf_type is not None:
            rule.golf_type = GolfDay(golf_type)

        self.logger.info("Rule updated", category=category, rule_id=rule_id, name=rule.name)
        return rule

    def remove_rule(self, category: str, rule_id: str) -> Rule:
        """Delete a rule and strip its key from every package of the category."""
        rule = self.get_rule(category, rule_id)
        self.rules[category] = [r for r in self.rules[category] if r.id != rule_id]

        for package in self.packages.values():
            if package.category == category:
                package.permissions.pop(rule_id, None)

        self.logger.info("Rule removed", category=category, rule_id=rule_id, name=rule.name)
        return rule

    # Packages

    def get_package(self, code: str) -> Package:
        package = self.packages.get(code)
        if package is None:
            raise NotFoundError("Package", code)
        return package

    def _blank_permissions(self, category: str) -> Dict[str, bool]:
        return {rule.id: False for rule in self.rules.get(category) or []}

    def add_package(self, code: str, category: str) -> Package:
        """Create a package with every rule of its category ungranted."""
        category = _validate_category(category)
        code = (code or "").strip()
        if not code:
            raise ValidationError("Package code is required")
        if code in self.packages:
            raise ValidationError(f"Package '{code}' already exists")

        package = Package(code=code, category=category, permissions=self._blank_permissions(category))
        self.packages[code] = package
        self.logger.info("Package added", code=code, category=category)
        return package

    def update_package(self, code: str, new_code: Optional[str] = None, category: Optional[str] = None) -> Package:
        """Rename and/or recategorize a package.

        Both inputs are validated before anything changes, so a rejected call
        leaves the package as it was. Renaming only re-keys the catalog;
        delegates still holding the old code are repointed by the caller with
        ``repoint_delegates``.
        """
        package = self.get_package(code)

        if category is not None:
            category = _validate_category(category)

        if new_code is not None:
            new_code = new_code.strip()
            if not new_code:
                raise ValidationError("Package code is required")
            if new_code != code and new_code in self.packages:
                raise ValidationError(f"Package '{new_code}' already exists")

        if category is not None and category != package.category:
            # Keep grants for rules the new category shares, seed the rest
            blank = self._blank_permissions(category)
            package.permissions = {
                rule_id: package.permissions.get(rule_id) is True for rule_id in blank
            }
            package.category = category

        if new_code is not None and new_code != code:
            del self.packages[code]
            package.code = new_code
            self.packages[new_code] = package
            self.logger.info("Package renamed", old_code=code, new_code=new_code)

        self.logger.info("Package updated", code=package.code, category=package.category)
        return package

    def remove_package(self, code: str) -> Package:
        """Delete a package. Delegates keep the dangling code."""
        package = self.get_package(code)
        del self.packages[code]
        self.logger.info("Package removed", code=code)
        return package

    def set_grant(self, code: str, rule_id: str, granted: bool) -> bool:
        package = self.get_package(code)
        self.get_rule(package.category, rule_id)
        package.permissions[rule_id] = bool(granted)
        self.logger.info("Grant updated", code=code, rule_id=rule_id, granted=bool(granted))
        return bool(granted)

    def toggle_grant(self, code: str, rule_id: str) -> bool:
        package = self.get_package(code)
        return self.set_grant(code, rule_id, not package.grants(rule_id))

    # Snapshots

    def snapshot(self) -> Tuple[PackageCatalog, RuleCatalog]:
        """Independent copies of both catalogs for evaluation."""
        return copy.deepcopy(self.packages), copy.deepcopy(self.rules)

    def to_documents(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Both catalogs as storable documents."""
        packages = {code: package.to_dict() for code, package in self.packages.items()}
        rules = {category: [rule.to_dict() for rule in items] for category, items in self.rules.items()}
        return packages, rules

    def get_catalog_stats(self) -> Dict[str, Any]:
        return {
            "total_packages": len(self.packages),
            "total_rules": sum(len(items) for items in self.rules.values()),
            "categories": sorted(self.rules.keys()),
        }


def repoint_delegates(delegates: Iterable[Delegate], old_code: str, new_code: str) -> List[Delegate]:
    """Copies of the delegates that held ``old_code``, now holding ``new_code``."""
    return [replace(d, package=new_code) for d in delegates if d.package == old_code]
